import re
from collections.abc import Callable
from pathlib import Path

import anyio
import pytest
from pydantic import BaseModel

from r2pilot.config import Radare2Config
from r2pilot.exceptions import NotRunningError, ResponseDecodeError, TransportError
from r2pilot.supervisor import ProcessState
from r2pilot.transport import PipeApi, Radare2Api

FakeConfigFactory = Callable[..., Radare2Config]


class CoreInfo(BaseModel):
    file: str
    size: int


class FileInfo(BaseModel):
    core: CoreInfo


class TestPipeApiCommands:
    @pytest.mark.anyio
    async def test_satisfies_protocol(self, fake_r2_config: FakeConfigFactory) -> None:
        assert isinstance(PipeApi(fake_r2_config()), Radare2Api)

    @pytest.mark.anyio
    async def test_execute_returns_trimmed_text(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            assert await r2.execute("?e hello") == "hello"
            assert await r2.execute("?e  padded  ") == "padded"

    @pytest.mark.anyio
    async def test_execute_without_trimming(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config(do_not_trim_output=True)) as r2:
            await r2.start()

            assert await r2.execute("?e hello") == "hello\n"

    @pytest.mark.anyio
    async def test_execute_json_decodes_any(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            assert await r2.execute_json("ij") == {"core": {"file": "stub", "size": 42}}

    @pytest.mark.anyio
    async def test_execute_json_validates_model(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            info = await r2.execute_json("ij", FileInfo)

        assert info == FileInfo(core=CoreInfo(file="stub", size=42))

    @pytest.mark.anyio
    async def test_execute_json_rejects_text(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            with pytest.raises(ResponseDecodeError, match=re.escape("'?e nope'")):
                _ = await r2.execute_json("?e nope")

            # The pipe stays usable after a decode failure.
            assert await r2.execute("?e still here") == "still here"

    @pytest.mark.anyio
    async def test_concurrent_commands_are_serialized(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        results: dict[int, str] = {}

        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            async def run(index: int) -> None:
                results[index] = await r2.execute(f"?e reply {index}")

            async with anyio.create_task_group() as tg:
                for index in range(10):
                    tg.start_soon(run, index)

        assert results == {index: f"reply {index}" for index in range(10)}

    @pytest.mark.anyio
    async def test_execute_before_start(self, fake_r2_config: FakeConfigFactory) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            with pytest.raises(NotRunningError) as exc_info:
                _ = await r2.execute("?e hello")

        assert exc_info.value.state == ProcessState.STOPPED


class TestPipeApiLifecycle:
    @pytest.mark.anyio
    async def test_crash_mid_command(self, fake_r2_config: FakeConfigFactory) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()

            with pytest.raises(TransportError, match="'crash'"):
                _ = await r2.execute("crash")

            with anyio.fail_after(10):
                info = await r2.supervisor.wait_stopped()

            assert info.state is ProcessState.DEAD
            assert info.exit_code == 7
            assert await r2.status() is ProcessState.DEAD

            with pytest.raises(NotRunningError):
                _ = await r2.execute("?e hello")

    @pytest.mark.anyio
    async def test_exit_before_ready(self, fake_r2_config: FakeConfigFactory) -> None:
        async with PipeApi(fake_r2_config("--no-ready")) as r2:
            with pytest.raises(TransportError, match="before becoming ready"):
                await r2.start()

            assert await r2.status() is not ProcessState.RUNNING

    @pytest.mark.anyio
    async def test_kill_then_execute(self, fake_r2_config: FakeConfigFactory) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()
            await r2.kill()

            assert await r2.status() is ProcessState.STOPPED
            with pytest.raises(NotRunningError):
                _ = await r2.execute("?e hello")

    @pytest.mark.anyio
    async def test_restart_starts_a_new_process(
        self, fake_r2_config: FakeConfigFactory
    ) -> None:
        async with PipeApi(fake_r2_config()) as r2:
            await r2.start()
            first_pid = r2.supervisor.pid

            await r2.restart()

            assert r2.supervisor.pid is not None
            assert r2.supervisor.pid != first_pid
            assert await r2.execute("?e again") == "again"

    @pytest.mark.anyio
    async def test_captures_responses(self, fake_r2_config: FakeConfigFactory) -> None:
        async with PipeApi(fake_r2_config("--stderr", "warming up", save_output=True)) as r2:
            await r2.start()
            _ = await r2.execute("?e captured")
            await r2.kill()

            info = r2.subscribe().receive_nowait()

        assert "captured" in info.output
        assert "warming up" in info.output

    @pytest.mark.anyio
    async def test_detach_before_kill(
        self, fake_r2_config: FakeConfigFactory, tmp_path: Path
    ) -> None:
        log = tmp_path / "commands.log"
        config = fake_r2_config("--log", str(log), detach_on_stop=True)

        async with PipeApi(config) as r2:
            await r2.start()
            _ = await r2.execute("?e hi")

        assert log.read_text(encoding="utf-8").splitlines() == ["?e hi", "dp-"]

    @pytest.mark.anyio
    async def test_no_detach_by_default(
        self, fake_r2_config: FakeConfigFactory, tmp_path: Path
    ) -> None:
        log = tmp_path / "commands.log"

        async with PipeApi(fake_r2_config("--log", str(log))) as r2:
            await r2.start()
            _ = await r2.execute("?e hi")

        assert log.read_text(encoding="utf-8").splitlines() == ["?e hi"]
