"""Tests for TaskListController paging, filtering and cancellation."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from skillpulse_cli.models import StoreError, StoreErrorKind
from skillpulse_cli.repositories import TaskRepository, filter_by_date
from skillpulse_cli.services.task_list import TaskListController
from skillpulse_cli.services.task_service import TaskService

OWNER = "u@x.com"
MONDAY = date(2026, 2, 9)
TUESDAY = date(2026, 2, 10)


@pytest.fixture()
def small_pages(store) -> TaskService:
    """Task service whose repository pages by three."""
    repository = TaskRepository(store, page_size=3, clock=lambda: MONDAY)
    return TaskService(repository)


async def _seed(service: TaskService, count: int) -> None:
    for i in range(count):
        day = MONDAY if i % 2 == 0 else TUESDAY
        await service.create_task(
            f"task {i}", OWNER, start_time=f"{day.isoformat()}T09:00:00+00:00"
        )


def _assert_view_consistent(controller: TaskListController) -> None:
    if controller.filter_date is None:
        assert controller.tasks == controller.all_tasks
    else:
        assert controller.tasks == filter_by_date(controller.all_tasks, controller.filter_date)


class TestReload:
    @pytest.mark.asyncio
    async def test_empty(self, small_pages):
        controller = TaskListController(small_pages, OWNER)

        assert await controller.reload() is True

        assert controller.all_tasks == []
        assert controller.tasks == []
        assert controller.last_task_id is None
        assert not controller.has_more
        assert not controller.is_loading

    @pytest.mark.asyncio
    async def test_first_page(self, small_pages):
        await _seed(small_pages, 5)
        controller = TaskListController(small_pages, OWNER)

        await controller.reload()

        assert [t.id for t in controller.all_tasks] == [
            "20260209005",
            "20260209004",
            "20260209003",
        ]
        assert controller.last_task_id == "20260209003"
        assert controller.has_more

    @pytest.mark.asyncio
    async def test_reload_keeps_filter(self, small_pages):
        await _seed(small_pages, 3)
        controller = TaskListController(small_pages, OWNER)
        await controller.apply_filter(TUESDAY)

        await controller.reload()

        assert [t.description for t in controller.tasks] == ["task 1"]
        _assert_view_consistent(controller)


class TestLoadMore:
    @pytest.mark.asyncio
    async def test_walks_all_pages(self, small_pages):
        await _seed(small_pages, 7)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()

        while controller.has_more:
            assert await controller.load_more() is True

        assert len(controller.all_tasks) == 7
        assert len({t.id for t in controller.all_tasks}) == 7
        assert controller.last_task_id is None
        assert await controller.load_more() is False

    @pytest.mark.asyncio
    async def test_filter_applies_to_appended_tasks(self, small_pages):
        await _seed(small_pages, 6)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()
        await controller.apply_filter(MONDAY)

        await controller.load_more()

        assert [t.description for t in controller.tasks] == ["task 4", "task 2", "task 0"]
        _assert_view_consistent(controller)

    @pytest.mark.asyncio
    async def test_failure_keeps_window(self, small_pages, mocker):
        await _seed(small_pages, 5)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()
        before = list(controller.all_tasks)

        mocker.patch.object(
            small_pages,
            "load_tasks",
            side_effect=StoreError(StoreErrorKind.LOAD_FAILED, "offline"),
        )
        with pytest.raises(StoreError) as exc_info:
            await controller.load_more()

        assert exc_info.value.kind is StoreErrorKind.LOAD_FAILED
        assert controller.all_tasks == before
        assert controller.last_task_id == "20260209003"
        assert controller.has_more
        assert not controller.is_loading

    @pytest.mark.asyncio
    async def test_concurrent_load_more_commits_once(self, small_pages):
        await _seed(small_pages, 5)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()

        results = await asyncio.gather(controller.load_more(), controller.load_more())

        assert sorted(results) == [False, True]
        assert len(controller.all_tasks) == 5


class TestCancellation:
    @pytest.mark.asyncio
    async def test_stale_reload_is_discarded(self, small_pages, mocker):
        await _seed(small_pages, 2)
        controller = TaskListController(small_pages, OWNER)
        original = small_pages.load_tasks
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow_first(owner_id, cursor=None):
            page = await original(owner_id, cursor)
            if not started.is_set():
                started.set()
                await release.wait()
                return page.model_copy(update={"tasks": []})
            return page

        mocker.patch.object(small_pages, "load_tasks", side_effect=slow_first)

        first = asyncio.create_task(controller.reload())
        await started.wait()
        assert await controller.reload() is True
        release.set()

        assert await first is False
        assert len(controller.all_tasks) == 2

    @pytest.mark.asyncio
    async def test_close_discards_in_flight_load(self, small_pages, mocker):
        await _seed(small_pages, 2)
        controller = TaskListController(small_pages, OWNER)
        original = small_pages.load_tasks
        release = asyncio.Event()

        async def blocked(owner_id, cursor=None):
            await release.wait()
            return await original(owner_id, cursor)

        mocker.patch.object(small_pages, "load_tasks", side_effect=blocked)

        pending = asyncio.create_task(controller.reload())
        await asyncio.sleep(0)
        controller.close()
        release.set()

        assert await pending is False
        assert controller.closed
        assert controller.all_tasks == []


class TestFilterAndMutations:
    @pytest.mark.asyncio
    async def test_apply_and_clear_filter(self, small_pages):
        await _seed(small_pages, 3)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()

        await controller.apply_filter(date(2030, 1, 1))
        assert controller.tasks == []

        await controller.clear_filter()
        assert controller.tasks == controller.all_tasks
        assert controller.filter_date is None

    @pytest.mark.asyncio
    async def test_add_reloads_first_page(self, small_pages):
        await _seed(small_pages, 3)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()

        task = await controller.add_task("fresh")

        assert controller.all_tasks[0] == task
        assert controller.has_more

    @pytest.mark.asyncio
    async def test_edit_replaces_in_place(self, small_pages):
        await _seed(small_pages, 3)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()
        await controller.apply_filter(MONDAY)

        await controller.edit_task(
            "20260209002",
            "moved",
            start_time="2026-02-09T10:00:00+00:00",
            end_time="2026-02-09T11:00:00+00:00",
        )

        assert [t.id for t in controller.all_tasks] == [
            "20260209003",
            "20260209002",
            "20260209001",
        ]
        assert "moved" in [t.description for t in controller.tasks]
        _assert_view_consistent(controller)

    @pytest.mark.asyncio
    async def test_remove_drops_from_both_lists(self, small_pages):
        await _seed(small_pages, 3)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()
        await controller.apply_filter(MONDAY)

        await controller.remove_task("20260209003")

        assert "20260209003" not in [t.id for t in controller.all_tasks]
        assert "20260209003" not in [t.id for t in controller.tasks]
        _assert_view_consistent(controller)

    @pytest.mark.asyncio
    async def test_suggestions_come_from_loaded_window(self, small_pages):
        # Eight tasks over three pages; only the first page is loaded
        await _seed(small_pages, 8)
        controller = TaskListController(small_pages, OWNER)
        await controller.reload()

        assert controller.suggestions("TASK") == ["task 7", "task 6", "task 5"]
        assert controller.suggestions("task", limit=1) == ["task 7"]
        assert controller.suggestions("task 1") == []
