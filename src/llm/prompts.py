"""
Prompts sent to the intelligence provider.

Recognition prompts ask for verbatim text only; the structuring prompt asks
for a JSON object with a ``tasks`` array. The reply is never trusted: see
extraction.task_structurer for the normalization applied to it.
"""

IMAGE_RECOGNITION_PROMPT = (
    "Extract all text from this image. Focus on handwritten notes, typed text, "
    "whiteboard content, or sticky notes. Return only the extracted text "
    "without any analysis, commentary or formatting."
)

AUDIO_RECOGNITION_PROMPT = (
    "Transcribe this audio recording accurately, keeping natural punctuation. "
    "Return only the transcribed text without any additional commentary."
)

STRUCTURE_SYSTEM_PROMPT = """You are a task organization expert. Analyze the provided text and extract actionable tasks.

For each task, determine:
- "title": a clear, concise title (max 50 characters)
- "description": optional, only if more context is needed
- "priority": one of "low", "medium", "high" based on urgency and importance
- "estimated_hours": realistic number of hours to complete
- "deadline": a human-readable deadline phrase such as "tomorrow", "this week", "next Monday", or null

Only extract items that are clearly actionable tasks. Ignore dates, signatures and non-actionable notes.

Respond with a JSON object of the form {"tasks": [...]} and nothing else."""

STRUCTURE_USER_PREFIX = "Extract and structure tasks from this text:"


def structure_user_prompt(text: str) -> str:
    return f"{STRUCTURE_USER_PREFIX}\n\n{text}"
