"""Prompt templates for chapter drafting and enrichment."""

from __future__ import annotations

FIRST_CHAPTER_PROMPT = """
You are writing chapter {chapter_number} of a web serial, the opening chapter.

Chapter outline:
- Title: {chapter_title}
- Connection point / role: {chapter_role}
- Payoff / purpose: {chapter_purpose}
- Emotional curve: {suspense_level}
- Cliffhanger: {foreshadowing}
- Tension rating: {plot_twist_level}
- One-line plot: {chapter_summary}

Novel setting:
{novel_setting}

Author guidance: {user_guidance}

Requirements:
- write about {word_number} words of finished prose
- establish the protagonist's predicament within the first scenes
- stay inside this chapter's outline and end on the cliffhanger above

Return only the chapter text, without the chapter heading.
""".strip()


NEXT_CHAPTER_PROMPT = """
You are continuing a web serial with chapter {chapter_number}.

Story so far:
{global_summary}

End of the previous chapter:
{previous_chapter_excerpt}

Current character state:
{character_state}

Chapter outline:
- Title: {chapter_title}
- Connection point / role: {chapter_role}
- Payoff / purpose: {chapter_purpose}
- Emotional curve: {suspense_level}
- Cliffhanger: {foreshadowing}
- Tension rating: {plot_twist_level}
- One-line plot: {chapter_summary}

Next chapter (do not write any of it):
- Chapter {next_chapter_number}: {next_chapter_title}
- Connection point / role: {next_chapter_role}
- Payoff / purpose: {next_chapter_purpose}
- Emotional curve: {next_suspense_level}
- Cliffhanger: {next_foreshadowing}
- Tension rating: {next_plot_twist_level}
- One-line plot: {next_chapter_summary}

Author guidance: {user_guidance}

Requirements:
- write about {word_number} words of finished prose
- pick up seamlessly from the end of the previous chapter
- keep every character consistent with the character state
- stop before the next chapter's events and end on this chapter's cliffhanger

Return only the chapter text, without the chapter heading.
""".strip()


ENRICH_CHAPTER_PROMPT = """
The chapter below is shorter than planned. Expand it to about {word_number} words.

Chapter text:
{chapter_text}

Requirements:
- keep the plot, order of events and ending unchanged
- deepen scenes with sensory detail, reactions of onlookers and inner thoughts
- do not add new plot events

Return only the expanded chapter text.
""".strip()
