"""All magic values live here — no inline literals anywhere else."""

PROVIDER_NAME = "google-gemini"

# Gemini endpoint
GEMINI_DEFAULT_MODEL = "gemini-2.5-flash"
GEMINI_DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GEMINI_GENERATE_PATH = "/models/{model}:generateContent"
GEMINI_KEY_PARAM = "key"
DEFAULT_TIMEOUT_SECONDS = 30
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
HTTP_TOO_MANY_REQUESTS = 429

# Sent verbatim as generationConfig
GENERATION_CONFIG = {
    "temperature": 0.4,
    "topK": 32,
    "topP": 1,
    "maxOutputTokens": 2048,
}

SOIL_ANALYSIS_PROMPT = (
    "Analyze this soil/land image and provide detailed information about: "
    "1) Soil condition and health, "
    "2) Detected objects (plants, rocks, water, etc.), "
    "3) Soil type indicators, "
    "4) Recommendations for soil improvement, "
    "5) Suggested crops that would grow well. "
    "Provide a structured JSON response with fields: soil_condition, detected_objects, "
    "soil_type, recommendations, suggested_crops, confidence_score."
)

# Field assembly defaults
DEFAULT_ISSUE = "Soil condition analyzed"
DEFAULT_RECOMMENDATIONS = ("Add organic matter", "Test soil pH")
DEFAULT_CROPS = ("Legumes", "Cover crops")
EXPLANATION_PREVIEW_CHARS = 200
EXPLANATION_ELLIPSIS = "..."

# Hard default, used when normalization itself fails
FALLBACK_ISSUE = "Analysis completed"
FALLBACK_EXPLANATION = "AI analysis completed successfully"
FALLBACK_RECOMMENDATIONS = ("Add organic compost", "Test soil pH", "Consider crop rotation")
FALLBACK_CROPS = ("Legumes", "Green manure crops", "Cover crops")
NO_RESPONSE_TEXT = "No response text"

# Keyword heuristics
CLAY_CONDITION = "Clay soil detected"
CLAY_RECOMMENDATION = "Add sand and organic matter for better drainage"
CLAY_CROPS = ("Wheat", "Barley")
SANDY_CONDITION = "Sandy soil detected"
SANDY_RECOMMENDATION = "Add compost to improve water retention"
SANDY_CROPS = ("Carrots", "Radishes")
ROCK_RECOMMENDATION = "Remove large rocks and debris"
VEGETATION_LABEL = "Vegetation"
VEGETATION_CONFIDENCE = 0.8
VEGETATION_CROPS = ("Tomatoes", "Lettuce")

# Error messages
MSG_ERR_NO_API_KEY = "Google Gemini API key not configured"
MSG_ERR_RATE_LIMIT = "AI service rate limit exceeded. Please try again later."
MSG_ERR_INFERENCE = "AI analysis failed: %s"
MSG_ERR_NOT_JSON = "provider returned a non-JSON body"
MSG_ERR_NOT_OBJECT = "provider returned a non-object JSON body"
MSG_ERR_NO_TEXT = "No response text from Gemini"
MSG_ERR_NO_JSON = "No JSON found in response"
MSG_ERR_BAD_TIMEOUT = "GEMINI_TIMEOUT must be a positive number of seconds"

# Log messages
MSG_RECEIVED_IMAGE = "Received image from user %s (%d bytes, lat=%s, lon=%s)"
MSG_CALLING_GEMINI = "→ Gemini %s"
MSG_GEMINI_DONE = "✓ Gemini responded (%.1fs)"
MSG_GEMINI_FAILED = "✗ Gemini call failed (%.1fs): %s"
MSG_GEMINI_RATE_LIMITED = "Gemini rate limit hit"
MSG_RAW_RESPONSE = "Gemini response: %s"
MSG_GENERATED_TEXT = "Gemini generated text: %s"
MSG_STRICT_FAILED = "No usable JSON in response, using keyword heuristics: %s"
MSG_NORMALIZE_FAILED = "Error processing Gemini response"
MSG_ANALYSIS_DONE = "Analysis completed for user %s"
MSG_ANALYSIS_ERROR = "Analysis error: %s"

# httpx logs every request URL at INFO, and the URL carries the API key
HTTPX_LOGGER = "httpx"
HTTPX_LOG_LEVEL = "WARNING"
