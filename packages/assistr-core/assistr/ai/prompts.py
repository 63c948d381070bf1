"""
Prompt text sent to the completion endpoint.
"""

import json
from typing import List, Optional

DEFAULT_SYSTEM_PROMPT = """You are a Personal AI Productivity Assistant that combines task management, voice interaction, and document analysis capabilities.

Your core responsibilities:
1. TASK MANAGEMENT: Help create, organize, prioritize, and track tasks intelligently
2. VOICE ASSISTANCE: Respond to voice commands with short, spoken-friendly answers
3. DOCUMENT ANALYSIS: Analyze uploaded documents and extract actionable insights

When creating tasks from user input:
- Always include a clear title and description
- Set priority to one of: low, medium, high, urgent
- Suggest relevant categories and tags
- Give due dates as ISO 8601 strings when the context implies one

For document analysis:
- Provide clear summaries and key insights
- Extract specific action items, deadlines and commitments

Respond in JSON when creating tasks or analyzing documents. For conversation, reply with a JSON object:
{"response": "...", "suggestions": ["..."], "generatedTasks": [...]}"""

TASK_GENERATION_SYSTEM_PROMPT = (
    "You are a task creation specialist. Convert natural language into well-structured tasks."
)

DOCUMENT_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert document analyzer. Analyze the provided document "
    "and return structured insights in JSON format."
)

TASK_SCHEMA = """{
  "title": "Clear task title",
  "description": "Detailed description",
  "priority": "low|medium|high|urgent",
  "category": "work|personal|health|shopping|etc",
  "dueDate": "ISO date string if mentioned or implied",
  "tags": ["relevant", "tags"]
}"""

# Extraction prompts carry at most this much document text
MAX_EXTRACTION_CHARS = 4000

# Chat context includes at most this many tasks
MAX_CONTEXT_TASKS = 10


def build_user_message(
    message: str,
    tasks: Optional[List[dict]] = None,
    document_names: Optional[List[str]] = None,
    voice_mode: bool = False,
) -> str:
    """Append session context to a chat message."""
    if not (tasks or document_names or voice_mode):
        return message

    parts = [message, "", "Context:"]
    if tasks:
        parts.append(f"Current tasks: {json.dumps(tasks[:MAX_CONTEXT_TASKS], indent=2)}")
    if document_names:
        parts.append(f"Recent documents: {', '.join(document_names)}")
    if voice_mode:
        parts.append("Note: This is a voice interaction - provide concise, spoken-friendly responses.")
    return "\n".join(parts)


def build_document_analysis_prompt(
    name: str,
    content: str,
    extract_tasks: bool = False,
    generate_summary: bool = True,
    get_insights: bool = True,
) -> str:
    lines = [f'Analyze this document: "{name}"', ""]
    if generate_summary:
        lines.append("- Provide a concise summary (2-3 sentences)")
    if get_insights:
        lines.append("- Extract 3-5 key insights or important points")
    if extract_tasks:
        lines.append("- Identify actionable tasks, deadlines, and next steps as task objects:")
        lines.append(TASK_SCHEMA)
    lines.append("")
    lines.append(
        "Return response as JSON with keys: summary, insights, extractedTasks, keyTopics, actionItems"
    )
    lines.append("")
    lines.append("Document content:")
    lines.append(content)
    return "\n".join(lines)


def build_task_generation_prompt(text: str, context: Optional[dict] = None) -> str:
    context_text = json.dumps(context, indent=2, default=str) if context else "None"
    return (
        f'Create structured tasks from this input: "{text}"\n\n'
        f"Context: {context_text}\n\n"
        f"Return JSON array of tasks with this structure:\n{TASK_SCHEMA}"
    )


def build_task_extraction_prompt(name: str, content: str) -> str:
    excerpt = content[:MAX_EXTRACTION_CHARS]
    if len(content) > MAX_EXTRACTION_CHARS:
        excerpt += " ..."

    return f"""Extract actionable tasks from this document: "{name}"

Content:
{excerpt}

Instructions:
1. Identify specific action items, to-dos, and next steps
2. Look for deadlines, due dates, and time-sensitive items
3. Find assignments and responsibilities mentioned
4. Extract follow-up actions and commitments
5. Prioritize based on urgency and importance mentioned

Return a JSON array of tasks with this structure:
{TASK_SCHEMA}"""
