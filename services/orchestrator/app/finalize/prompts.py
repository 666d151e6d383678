"""Prompt templates for refreshing the rolling summary and character state."""

from __future__ import annotations

SUMMARY_PROMPT = """
Newly finished chapter:
{chapter_text}

Current story summary (may be empty):
{global_summary}

Update the story summary with what this chapter adds. Prioritise:
1. progress of the main conflict: who is pressing the protagonist and how they push back
2. payoffs that actually landed in this chapter
3. changes in power, status, resources, relationships and information
4. the hook the chapter ends on and the next looming threat

Requirements:
- keep the important existing information and merge in the new plot points
- describe the progress of the whole book in concise, connected prose
- stay objective, no speculation or interpretation
- keep the summary under 2000 characters

Return only the summary text.
""".strip()


UPDATE_CHARACTER_STATE_PROMPT = """
Newly finished chapter:
{chapter_text}

Current character state document:
{old_state}

Update the state of the main characters, keeping the existing structure.

Requirements:
- edit the existing document in place rather than rewriting it
- briefly add newly introduced characters and drop those who left the story
- focus on what matters for the next chapter: power, injuries, resources, grudges, deadlines
- note where every new ability or item came from and remove spent resources

Return only the updated character state text.
""".strip()
