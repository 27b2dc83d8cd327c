"""
Prompt management for vehicle extraction from section screenshots.
"""

from pathlib import Path
from typing import Optional

from dealer_vision.core.logging import get_logger

logger = get_logger(__name__)

# Output schema the model is asked to fill
DEFAULT_PROMPT = """{
  "vehicles": [
    {
      "title": "full vehicle name including manufacturer and model",
      "year": "vehicle year",
      "price": "exact price text as shown (include 'Call for Price', 'Contact Us', etc. if shown)",
      "description": "any descriptive text about the vehicle's condition, features, or history",
      "specifications": {
        "make": "manufacturer name",
        "model": "specific model name/number",
        "chassis": "chassis type if shown",
        "condition": "new/pre-owned/used",
        "stock_number": "stock or reference number",
        "mileage": "current mileage with exact format as shown",
        "passenger_capacity": "number of passengers",
        "engine": "engine specifications if shown",
        "transmission": "transmission type if shown",
        "fuel_type": "gas/diesel/other",
        "exterior_color": "vehicle color",
        "location": "listed location",
        "dimensions": {
          "length": "vehicle length if shown",
          "width": "vehicle width if shown",
          "height": "vehicle height if shown"
        },
        "features": []
      }
    }
  ]
}"""


def load_extraction_prompt(prompt_path: Optional[Path] = None) -> str:
    """
    Load the output-schema prompt from file with fallback to default.

    Args:
        prompt_path: Optional path to a custom prompt file.
                    Defaults to configs/vehicle_extraction_prompt.txt

    Returns:
        Prompt text string
    """
    if prompt_path is None:
        prompt_path = Path("configs/vehicle_extraction_prompt.txt")

    if prompt_path.exists():
        try:
            content = prompt_path.read_text(encoding='utf-8')
            logger.info(f"Loaded extraction prompt from {prompt_path}")
            return content
        except Exception as e:
            logger.warning(f"Failed to load prompt from {prompt_path}: {e}. Using default.")
            return DEFAULT_PROMPT
    else:
        logger.debug(f"Prompt file not found at {prompt_path}. Using default.")
        return DEFAULT_PROMPT


def build_section_prompt(start_index: int, end_index: int, schema: Optional[str] = None) -> str:
    """
    Full prompt for one section, naming its 1-based item range.

    Example:
        >>> "items 5 to 8" in build_section_prompt(4, 8)
        True
    """
    schema = schema if schema is not None else load_extraction_prompt()
    return (
        f"Analyze this section of vehicle listings (items {start_index + 1} to {end_index} "
        f"of the page) and extract detailed information. Structure the data as follows:\n\n"
        f"{schema}"
    )
