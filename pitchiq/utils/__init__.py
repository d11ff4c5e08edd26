"""Domain types, content tables, decode boundary and the Gemini client."""
