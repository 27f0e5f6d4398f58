SYSTEM_PROMPT = (
    "You are an expert in viral content analysis. "
    "Analyze text from video captions and determine its viral potential "
    "as a YouTube Short. Respond with valid JSON only."
)

USER_PROMPT_TEMPLATE = """Analyze the following text from a video caption and determine its viral potential.

Caption text:
\"\"\"
{text}
\"\"\"

Return ONLY valid JSON in this exact format:
{{"score":0.0,"reasons":["..."],"emotions":["..."],"keywords":["..."],"summary":"..."}}

Rules:
- score is a number from 0 to 1 representing viral potential
- reasons lists why this content might go viral
- emotions lists the emotions this content might evoke
- keywords lists key phrases or topics in the content
- summary is one short sentence describing the content
- Reward emotional impact (surprising, funny, inspiring, controversial), storytelling, relatable experiences, unique insights, debate-worthy statements and quotable moments
- Return ONLY the JSON object, nothing else"""
