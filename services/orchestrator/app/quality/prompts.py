"""Prompt templates for the automated quality check and repair pass."""

from __future__ import annotations

QUALITY_CHECK_PROMPT = """
You are a strict web-serial editor checking a chapter that was just written.

Current chapter:
- Chapter {chapter_number}: {chapter_title}
- Outline: {chapter_summary}
- Target length: {word_number} words
- Actual length: {actual_word_count} words (already counted, do not recount)

Next chapter (used to detect leakage):
- Chapter {next_chapter_number}: {next_chapter_title}
- Outline: {next_chapter_summary}

Chapter text:
{chapter_text}

Check the chapter and answer with a JSON report in exactly this shape:

{{
  "wordCount": {actual_word_count},
  "wordCountPass": {word_count_pass_json},
  "contentMatch": true or false, whether the text follows the current outline,
  "nextChapterSpill": true or false, true when the next chapter's events are already written here,
  "hasCliffhanger": true or false, whether the ending leaves a hook or open threat,
  "overallPass": true only when every check is fine,
  "issues": ["one entry per concrete problem"]
}}

Criteria:
1. Length: {actual_word_count} words against a target of {word_number}; the accepted range is {low_words}-{high_words} words, so this check {word_count_verdict}.
2. Content: the chapter must stay on its own outline.
3. Leakage: reaching the core event of the next chapter's outline counts as a spill.
4. Cliffhanger: the ending must leave suspense, danger or anticipation.

Return only the JSON object.
""".strip()


REPAIR_PROMPT = """
You are a professional web-serial editor. Repair the chapter below using the quality report.

Current chapter:
- Chapter {chapter_number}: {chapter_title}
- Outline: {chapter_summary}
- Target length: {word_number} words

Next chapter (never write any of it into this chapter):
- Chapter {next_chapter_number}: {next_chapter_title}

Problems found:
{issues}

Original chapter:
{chapter_text}

---

Fix the following:
{instructions}

Repair principles:
1. keep the strongest parts of the original and change only what is broken
2. keep the style consistent
3. land within {low_words}-{high_words} words
4. never write the next chapter's content

Return only the repaired chapter text.
""".strip()


WORD_COUNT_INSTRUCTION = """
[Length]
- current length {word_count} words, target {word_number} words
- if too short, expand: onlookers' reactions, the opponent losing composure, fight detail, concrete gains
- if too long, tighten: remove repetition, redundant description and idle dialogue
""".strip()

LEAKAGE_INSTRUCTION = """
[Leakage]
- the chapter already contains events from the next chapter; remove them
- end on a fitting cliffhanger where the removed part began
- write nothing from chapter {next_chapter_number} or "{next_chapter_title}"
""".strip()

CLIFFHANGER_INSTRUCTION = """
[Cliffhanger]
- the ending has no hook; rewrite it
- add one of: an unresolved crisis, a new enemy, a greater opportunity, a key turn
""".strip()

CONTENT_MATCH_INSTRUCTION = """
[Outline match]
- the content drifts from the outline; bring it back in line
- make sure the chapter's core event matches the outline
""".strip()
