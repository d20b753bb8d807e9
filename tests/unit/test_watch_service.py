"""
Tests for WatchService with a fake file watcher.
"""

import asyncio
from pathlib import Path

import pytest

from pcs.core.config import PCSConfig, ScannerConfig, WatchConfig
from pcs.core.file_events import FileEvent, FileEventType
from pcs.infrastructure.fakes import FakeFileWatcher
from pcs.services.scan_service import ScanOrchestrator
from pcs.services.watch_service import PathValidationError, WatchService, WatchServiceError


def _orchestrator(root: Path) -> ScanOrchestrator:
    scanner = ScannerConfig(exclude_patterns=[], host_excludes={})
    return ScanOrchestrator(root, PCSConfig(scanner=scanner))


def _event(root: Path, name: str) -> FileEvent:
    return FileEvent(event_type=FileEventType.MODIFIED, file_path=root / name)


@pytest.fixture
def project(tmp_path) -> Path:
    (tmp_path / "main.py").write_text("import os\n", encoding="utf-8")
    return tmp_path


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_start_runs_initial_scan(self, project):
        watcher = FakeFileWatcher()
        service = WatchService(_orchestrator(project), watcher, WatchConfig(debounce_ms=50))

        await service.start()
        try:
            assert service.is_running()
            assert watcher.is_running()
            assert watcher.watch_path == project.resolve()
            assert (project / "project-context.json").exists()
            assert service.get_stats().scans_triggered == 1
        finally:
            await service.stop()

        assert not service.is_running()
        assert not watcher.is_running()

    @pytest.mark.asyncio
    async def test_start_without_initial_scan(self, project):
        config = WatchConfig(debounce_ms=50, scan_on_start=False)
        service = WatchService(_orchestrator(project), FakeFileWatcher(), config)

        await service.start()
        await service.stop()

        assert not (project / "project-context.json").exists()
        assert service.get_stats().scans_triggered == 0

    @pytest.mark.asyncio
    async def test_start_twice_fails(self, project):
        config = WatchConfig(debounce_ms=50, scan_on_start=False)
        service = WatchService(_orchestrator(project), FakeFileWatcher(), config)
        await service.start()
        try:
            with pytest.raises(WatchServiceError):
                await service.start()
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_missing_root(self, tmp_path):
        service = WatchService(_orchestrator(tmp_path / "missing"), FakeFileWatcher())
        with pytest.raises(PathValidationError):
            await service.start()

    @pytest.mark.asyncio
    async def test_stop_when_not_running(self, project):
        service = WatchService(_orchestrator(project), FakeFileWatcher())
        await service.stop()
        assert not service.is_running()


class TestChangeTriggers:
    @pytest.mark.asyncio
    async def test_burst_of_events_triggers_one_scan(self, project):
        watcher = FakeFileWatcher()
        config = WatchConfig(debounce_ms=100, scan_on_start=False)
        service = WatchService(_orchestrator(project), watcher, config)
        await service.start()
        try:
            for _ in range(5):
                watcher.trigger_event(_event(project, "main.py"))
            await asyncio.sleep(0.05)
            assert service.get_pending_count() == 5
            assert len(watcher.get_triggered_events()) == 5

            await asyncio.sleep(0.5)
            stats = service.get_stats()
            assert stats.events_received == 5
            assert stats.scans_triggered == 1
            assert stats.last_scan_at is not None
            assert service.get_pending_count() == 0
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_notify_change_from_thread(self, project):
        config = WatchConfig(debounce_ms=50, scan_on_start=False)
        service = WatchService(_orchestrator(project), FakeFileWatcher(), config)
        await service.start()
        try:
            await asyncio.to_thread(service.notify_change)
            await asyncio.sleep(0.4)
            assert service.get_stats().scans_triggered == 1
            assert (project / "project-context.json").exists()
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_trigger_during_scan_is_dropped(self, project):
        orchestrator = _orchestrator(project)
        config = WatchConfig(debounce_ms=20, scan_on_start=False)
        service = WatchService(orchestrator, FakeFileWatcher(), config)
        await service.start()
        try:
            assert orchestrator.session.try_begin()
            service.notify_change()
            await asyncio.sleep(0.3)
            orchestrator.session.end()

            stats = service.get_stats()
            assert stats.scans_rejected == 1
            assert stats.scans_triggered == 0
            assert not (project / "project-context.json").exists()
        finally:
            await service.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_trigger(self, project):
        watcher = FakeFileWatcher()
        config = WatchConfig(debounce_ms=200, scan_on_start=False)
        service = WatchService(_orchestrator(project), watcher, config)
        await service.start()

        watcher.trigger_event(_event(project, "main.py"))
        await asyncio.sleep(0.02)
        await service.stop()
        await asyncio.sleep(0.3)

        assert service.get_stats().scans_triggered == 0
        assert not (project / "project-context.json").exists()

    @pytest.mark.asyncio
    async def test_scan_failure_is_counted(self, project):
        orchestrator = _orchestrator(project)
        config = WatchConfig(debounce_ms=20, scan_on_start=False)
        service = WatchService(orchestrator, FakeFileWatcher(), config)
        await service.start()
        try:
            (project / "main.py").unlink()
            project.rmdir()
            service.notify_change()
            await asyncio.sleep(0.3)
            assert service.get_stats().errors == 1
        finally:
            await service.stop()


def test_stats_to_dict():
    service = WatchService(_orchestrator(Path(".")), FakeFileWatcher())
    stats = service.get_stats().to_dict()
    assert stats["scans_triggered"] == 0
    assert stats["scans_rejected"] == 0
    assert stats["last_scan_at"] is None
