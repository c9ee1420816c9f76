"""End-to-end tests for :mod:`netBrowse.gui.ui.controllers.browse_controller`."""

from __future__ import annotations

import os

import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for controller tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtWidgets", reason="Qt widgets not available", exc_type=ImportError)

from PySide6.QtWidgets import QApplication

from netBrowse.config import ROOT_OBJECT_ID, TITLE_SORT_TOKEN
from netBrowse.errors import FetchFailedError, NoPlayableSelectionError
from netBrowse.gui.ui.controllers.browse_controller import BrowseController
from netBrowse.models.types import Descriptor
from netBrowse.network.registry import DeviceRegistry

from conftest import make_device


@pytest.fixture(scope="module")
def qapp() -> QApplication:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture()
def server_x():
    return make_device("ServerX")


@pytest.fixture()
def controller(qapp, fake_client, manual_pool, server_x) -> BrowseController:
    fake_client.listings[(server_x.udn, ROOT_OBJECT_ID)] = [
        Descriptor("1", "Movies", True),
        Descriptor("2", "a.mp4", False, "http://x/2"),
    ]
    registry = DeviceRegistry()
    registry.add_device(server_x)
    instance = BrowseController(registry, fake_client, pool=manual_pool)
    instance.start()
    return instance


def test_browse_and_open_a_playable_item(controller, fake_client, manual_pool, server_x) -> None:
    model = controller.model
    opened: list[list[str]] = []
    controller.selectionOpened.connect(opened.append)
    device_index = model.index(0, 0)
    server = model.node_from_index(device_index)

    assert controller.on_user_navigate(device_index) is True
    assert model.child_count(server) == 0
    manual_pool.run_all()

    assert fake_client.browse_calls == [(server_x.udn, ROOT_OBJECT_ID, TITLE_SORT_TOKEN)]
    assert model.child_count(server) == 2
    assert model.display_label(model.child(server, 0)) == "Movies"
    assert model.is_leaf(model.child(server, 1)) is True

    controller.on_selection_changed([model.index(1, 0, device_index)])

    assert controller.selection.has_playable_selection() is True
    assert controller.open_selection() == ["http://x/2"]
    assert opened == [["http://x/2"]]


def test_mixed_selection_opens_only_leaves(controller, manual_pool) -> None:
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()

    controller.on_selection_changed(
        [model.index(0, 0, device_index), model.index(1, 0, device_index)]
    )

    assert controller.open_selection() == ["http://x/2"]


def test_opening_without_playable_selection_raises(controller, manual_pool) -> None:
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()
    controller.on_selection_changed([model.index(0, 0, device_index)])

    with pytest.raises(NoPlayableSelectionError):
        controller.open_selection()


def test_navigating_a_leaf_does_nothing(controller, manual_pool) -> None:
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()

    assert controller.on_user_navigate(model.index(1, 0, device_index)) is False
    assert manual_pool.workers == []


def test_fetch_failures_are_reported(controller, fake_client, manual_pool, server_x) -> None:
    fake_client.listings[(server_x.udn, ROOT_OBJECT_ID)] = FetchFailedError("unreachable")
    messages: list[str] = []
    controller.errorRaised.connect(messages.append)

    controller.on_user_navigate(controller.model.index(0, 0))
    manual_pool.run_all()

    assert messages == ["Could not list ServerX: unreachable"]


def test_close_forgets_the_tree_and_selection(controller, manual_pool) -> None:
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()
    controller.on_selection_changed([model.index(1, 0, device_index)])

    controller.close()

    assert controller.selection.has_playable_selection() is False
    assert model.root_count() == 0


def test_removed_device_drops_its_selected_leaves(controller, manual_pool, server_x) -> None:
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()
    controller.on_selection_changed([model.index(1, 0, device_index)])
    states: list[bool] = []
    controller.selection.playableChanged.connect(states.append)

    assert controller._registry.remove_device(server_x.udn) is True

    assert model.root_count() == 0
    assert states == [False]
    assert controller.selection.has_playable_selection() is False
    assert controller.selection.playable_locators() == []
    with pytest.raises(NoPlayableSelectionError):
        controller.open_selection()


def test_reloading_a_container_drops_only_its_selected_leaves(
    controller, fake_client, manual_pool, server_x
) -> None:
    fake_client.listings[(server_x.udn, "1")] = [Descriptor("11", "b.mp4", False, "http://x/11")]
    model = controller.model
    device_index = model.index(0, 0)
    controller.on_user_navigate(device_index)
    manual_pool.run_all()
    movies_index = model.index(0, 0, device_index)
    controller.on_user_navigate(movies_index)
    manual_pool.run_all()
    controller.on_selection_changed(
        [model.index(1, 0, device_index), model.index(0, 0, movies_index)]
    )
    assert controller.selection.playable_locators() == ["http://x/2", "http://x/11"]

    controller.on_user_navigate(movies_index)

    assert controller.selection.playable_locators() == ["http://x/2"]
