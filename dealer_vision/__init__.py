"""dealer-vision: vehicle listing capture with Gemini vision extraction."""
