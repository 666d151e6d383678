"""Prompt templates for chapter blueprint generation."""

from __future__ import annotations

ENTRY_FORMAT = """
Chapter N - [Title]
Connection point: how this chapter picks up from the previous one
Payoff: the satisfying moment this chapter delivers
Conflict: who pushes against the protagonist and how
Reward: what the protagonist gains
Emotional curve: the emotional movement across the chapter
Cliffhanger: the hook the chapter ends on
Tension rating: ★☆☆☆☆ to ★★★★★
One-line plot: a single sentence describing the chapter
""".strip()


BLUEPRINT_PROMPT = """
Novel architecture:
{novel_architecture}

Author guidance: {user_guidance}

Write the chapter blueprint for all {number_of_chapters} chapters. Every chapter
must follow exactly this format, with a blank line between chapters:

{entry_format}

Requirements:
- number the chapters consecutively from 1 to {number_of_chapters}
- every chapter must advance the main conflict and end on a hook
- spread the major payoffs according to the plot architecture

Return only the blueprint text.
""".strip()


BLUEPRINT_CHUNK_PROMPT = """
Novel architecture:
{novel_architecture}

Author guidance: {user_guidance}

The novel has {number_of_chapters} chapters in total. The outline written so far:
{chapter_list}

Continue the blueprint with chapters {start_chapter} to {end_chapter} only. Every
chapter must follow exactly this format, with a blank line between chapters:

{entry_format}

Requirements:
- start at chapter {start_chapter} and stop after chapter {end_chapter}
- stay consistent with the outline written so far, do not repeat its events
- keep escalating towards the payoffs planned in the plot architecture

Return only the new chapters.
""".strip()
