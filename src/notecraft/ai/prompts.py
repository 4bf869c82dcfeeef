"""System prompts per action."""

from ..core.model import PatchAction

ANALYZE = """You are an AI assistant helping users improve their notes. Analyze the following note and suggest improvements.

Return a JSON object with this structure:
{
  "suggestions": [
    {
      "action": "title-tags" | "extract-tasks" | "rewrite" | "summarize",
      "rationale": "Brief explanation of why this would help",
      "priority": "high" | "medium" | "low"
    }
  ]
}

Only suggest improvements that would genuinely help. Don't suggest changes for well-formatted content.
Keep suggestions concise and actionable."""

STITCH = """Combine the following notes into a single coherent document.
- Create a logical structure with sections
- Add a table of contents
- Write a brief summary at the end
- Preserve important details from each note

Notes to combine:"""

DEFAULT_LANGUAGE = "Spanish"

ACTION_PROMPTS: dict[PatchAction, str] = {
    PatchAction.SUMMARIZE: (
        "Summarize the following note in 1-2 sentences. Focus on the key points and main ideas."
    ),
    PatchAction.EXTRACT_TASKS: (
        "Extract actionable tasks from the following note. "
        'Return as a markdown checklist with "- [ ]" format.\n'
        "Only extract actual tasks mentioned, don't invent new ones."
    ),
    PatchAction.REWRITE: (
        "Improve the formatting and clarity of the following note while preserving its meaning.\n"
        "- Fix grammar and spelling\n"
        "- Improve structure\n"
        "- Clean up whitespace\n"
        "- Add markdown formatting where helpful\n\n"
        "Return only the improved text, no explanations."
    ),
    PatchAction.TITLE_TAGS: (
        "For the following note:\n"
        "1. Suggest a concise title (if the first line isn't already a good title)\n"
        "2. Suggest 2-3 relevant tags based on the content\n\n"
        'Return as JSON: { "title": "...", "tags": ["tag1", "tag2"] }'
    ),
    PatchAction.CONTINUE: (
        "Continue writing from where the text leaves off. "
        "Match the style and tone of the existing content.\n"
        "Write 2-4 more sentences or a short paragraph that naturally extends the content.\n"
        "Return only the continuation text, no explanations."
    ),
    PatchAction.EXPAND: (
        "Expand on the following text by adding more detail, examples, or explanation.\n"
        "Maintain the same writing style and voice.\n"
        "Return only the expanded text, no explanations."
    ),
    PatchAction.SIMPLIFY: (
        "Rewrite the following text to make it simpler and easier to understand.\n"
        "- Use shorter sentences\n"
        "- Replace complex words with simpler alternatives\n"
        "- Break down complicated ideas\n"
        "- Keep the core meaning intact\n"
        "Return only the simplified text, no explanations."
    ),
    PatchAction.FIX_GRAMMAR: (
        "Fix any grammar, spelling, and punctuation errors in the following text.\n"
        "Make minimal changes - only fix actual errors, don't rephrase unnecessarily.\n"
        "Return only the corrected text, no explanations."
    ),
    PatchAction.TRANSLATE: (
        "Translate the following text to {language}.\n"
        "Maintain the original meaning and tone as closely as possible.\n"
        "Return only the translated text, no explanations."
    ),
    PatchAction.ASK_AI: (
        "You are a helpful assistant. Answer the user's question based on their note content.\n"
        "Be concise but thorough. If the note doesn't contain relevant information, say so."
    ),
    PatchAction.EXPLAIN: (
        "Explain the following text in simple terms.\n"
        "- Break down complex concepts\n"
        "- Use analogies if helpful\n"
        "- Structure your explanation clearly\n"
        "Keep your explanation concise but comprehensive."
    ),
    PatchAction.OUTLINE: (
        "Convert this note into a well-structured outline format.\n"
        "- Create clear hierarchical sections\n"
        "- Use markdown headers (##, ###)\n"
        "- Organize content logically\n"
        "- Add bullet points for key points\n"
        "- Group related ideas together\n"
        "- Keep the original information, just reorganize it\n"
        "Return only the restructured content in outline format."
    ),
}


def system_prompt(
    action: PatchAction,
    custom_prompt: str | None = None,
    target_language: str | None = None,
) -> str:
    if action is PatchAction.ASK_AI and custom_prompt:
        return f"{ACTION_PROMPTS[action]}\n\nUser's question: {custom_prompt}"
    if action is PatchAction.TRANSLATE:
        return ACTION_PROMPTS[action].format(language=target_language or DEFAULT_LANGUAGE)
    return ACTION_PROMPTS[action]
