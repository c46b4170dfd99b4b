"""Tests for template previews and the select/confirm interaction."""

import asyncio

import pytest
from PIL import Image

from photobooth.errors import TemplateIndexError
from photobooth.models.session import BoothSession, SelectionOutcome
from photobooth.services.templates import TemplateSelector


def _session_with_shots() -> BoothSession:
    session = BoothSession(shot_index=3)
    session.shots.extend(Image.new("RGB", (100, 50), c) for c in ("red", "lime", "blue"))
    return session


def test_populate_renders_every_template(builder, booth_config) -> None:
    selector = TemplateSelector(builder)
    session = _session_with_shots()
    session.selected_template_index = 1

    previews = asyncio.run(selector.populate(session, booth_config))

    assert [p.size for p in previews] == [(300, 50), (120, 200)]
    assert previews[0].getpixel((5, 25)) == (255, 255, 255)
    assert previews[0].getpixel((150, 25)) == (0, 255, 0)
    # overlay for the second template is missing; the preview still renders
    assert previews[1].getpixel((50, 30)) == (255, 0, 0)
    assert session.selected_template_index is None


def test_two_clicks_on_same_template_confirm(builder, booth_config) -> None:
    selector = TemplateSelector(builder)
    session = _session_with_shots()
    asyncio.run(selector.populate(session, booth_config))

    assert selector.click(session, 0) == SelectionOutcome.selected
    assert session.selected_template_index == 0
    assert selector.click(session, 0) == SelectionOutcome.confirmed
    assert session.selected_template_index is None


def test_click_on_other_template_moves_selection(builder, booth_config) -> None:
    selector = TemplateSelector(builder)
    session = _session_with_shots()
    asyncio.run(selector.populate(session, booth_config))

    assert selector.click(session, 0) == SelectionOutcome.selected
    assert selector.click(session, 1) == SelectionOutcome.selected
    assert session.selected_template_index == 1
    assert selector.click(session, 1) == SelectionOutcome.confirmed


def test_click_outside_grid_raises(builder, booth_config) -> None:
    selector = TemplateSelector(builder)
    session = _session_with_shots()
    asyncio.run(selector.populate(session, booth_config))

    with pytest.raises(TemplateIndexError):
        selector.click(session, 2)


def test_clear_drops_previews(builder, booth_config) -> None:
    selector = TemplateSelector(builder)
    asyncio.run(selector.populate(_session_with_shots(), booth_config))

    selector.clear()

    assert selector.previews == []
