"""Response formatting bridge -- maps decoded API models to the output system.

This module bridges the client layer and the output layer. CLI commands hand
it decoded :class:`~anidex.models.Anime` records and it renders them through
:meth:`~anidex.output.OutputManager.print_table` or
:meth:`~anidex.output.OutputManager.format_response`, so the active
``--json``/``--plain`` mode applies.

See Also:
    :mod:`anidex.output` -- the output manager that renders data.
"""

from __future__ import annotations

from typing import Optional, Sequence

from anidex.models import Anime, Character, RecommendationEntry
from anidex.output import OutputFormat, get_output

ANIME_HEADERS = ["ID", "Title", "Type", "Episodes", "Score", "Status"]


def anime_row(anime: Anime) -> list[str]:
    """Render one anime as table cells."""
    return [
        str(anime.malId),
        anime.display_title,
        anime.type or "",
        anime.display_episodes,
        anime.display_score,
        anime.status or "",
    ]


def format_anime_list(animes: Sequence[Anime], title: Optional[str] = None) -> None:
    """Print a list of anime as a table in the active output format."""
    get_output().print_table(ANIME_HEADERS, [anime_row(a) for a in animes], title=title)


def format_anime_detail(
    anime: Anime,
    characters: Sequence[Character] = (),
    recommendations: Sequence[RecommendationEntry] = (),
) -> None:
    """Print a detail record with its related lists.

    JSON mode emits one object; other modes print a field table followed by
    the characters and recommendations tables.
    """
    output = get_output()

    if output.format == OutputFormat.JSON:
        output.format_response(
            {
                "anime": anime.model_dump(mode="json"),
                "characters": [c.model_dump(mode="json") for c in characters],
                "recommendations": [r.model_dump(mode="json") for r in recommendations],
            }
        )
        return

    fields = [
        ["Title", anime.display_title],
        ["Japanese", anime.titleJapanese or ""],
        ["Type", anime.type or ""],
        ["Episodes", anime.display_episodes],
        ["Score", anime.display_score],
        ["Status", anime.status or ""],
        ["Rating", anime.rating or ""],
        ["Genres", anime.genres_list],
        ["Synopsis", anime.synopsis or ""],
    ]
    output.print_table(["Field", "Value"], fields, title=f"#{anime.malId}")

    if characters:
        output.print_table(
            ["ID", "Name", "Role"],
            [[str(c.malId), c.name, c.role or ""] for c in characters],
            title="Characters",
        )
    if recommendations:
        output.print_table(
            ["ID", "Title"],
            [[str(r.malId), r.title or ""] for r in recommendations],
            title="Recommendations",
        )
