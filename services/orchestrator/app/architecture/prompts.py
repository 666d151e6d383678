"""Prompt templates for the five architecture sub-stages."""

from __future__ import annotations

CORE_SEED_PROMPT = """
As a professional web-novel architect, distil the core seed of a new serial.

Topic: {topic}
Genre: {genre}
Planned length: {number_of_chapters} chapters of about {word_number} words each
Author guidance: {user_guidance}

Write the core seed as one tight paragraph covering:
- the protagonist's starting predicament and the driving desire
- the central conflict that can sustain the whole serial
- the unique hook that separates this story from others in the genre

Return only the core seed text.
""".strip()


CHARACTER_DYNAMICS_PROMPT = """
Core seed:
{core_seed}

Topic: {topic}; Genre: {genre}
Author guidance: {user_guidance}

Design the cast. For the protagonist and 3-6 key characters give:
- role in the story and core drive
- surface goal versus deeper need
- relationship tensions with other characters
- how each character is expected to change over the arc

Return only the character system text.
""".strip()


CHARACTER_STATE_PROMPT = """
Core seed:
{core_seed}

Character dynamics:
{character_dynamics}

Create the initial character state document used to track the cast chapter by
chapter. For each main character list, as short bullet items:
- abilities and power level
- items and resources
- injuries or conditions
- relationships and grudges
- active goals and countdowns

Return only the character state document.
""".strip()


WORLD_BUILDING_PROMPT = """
Core seed:
{core_seed}

Character dynamics:
{character_dynamics}

Initial character state:
{character_state}

Genre: {genre}
Author guidance: {user_guidance}

Build the world the story needs:
- physical setting and the rules of power (magic, technology, social order)
- factions and institutions that create pressure on the protagonist
- resources, ranks or currencies the plot will revolve around
- locations the first arcs will visit

Return only the world-building text.
""".strip()


PLOT_ARCHITECTURE_PROMPT = """
Core seed:
{core_seed}

Character dynamics:
{character_dynamics}

Initial character state:
{character_state}

World building:
{world_building}

Planned length: {number_of_chapters} chapters of about {word_number} words each
Author guidance: {user_guidance}

Design a three-act plot architecture:
- Act one: inciting incident, the first reversal, what the protagonist loses
- Act two: escalating conflicts, the midpoint twist, the darkest moment
- Act three: the climax, the payoff of planted threads, the resolution
Mark roughly which chapters each act spans and where the major payoffs land.

Return only the plot architecture text.
""".strip()
