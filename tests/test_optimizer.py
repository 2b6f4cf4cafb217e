import asyncio
import os
import sys

import pytest

from webar.modules.optimizer import ModelOptimizer, OptimizationQueue, OptimizerError, OptimizerTimeoutError, format_size

COPY = "import shutil, sys; shutil.copyfile(sys.argv[1], sys.argv[2])"


def _python(code: str, *args: str) -> list:
    return [sys.executable, "-c", code, *args]


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "uploads" / "abc12345-model.glb"
    path.parent.mkdir()
    path.write_bytes(b"glTF-original")
    return path


def _optimizer(tmp_path, command, **kwargs) -> ModelOptimizer:
    return ModelOptimizer(command=command, optimized_root=tmp_path / "optimized", **kwargs)


def test_successful_run_publishes_variant(tmp_path, source):
    optimizer = _optimizer(tmp_path, _python(COPY, "{input}", "{output}"))

    result = asyncio.run(optimizer.optimize(source))

    assert result == tmp_path / "optimized" / source.name
    assert result.read_bytes() == b"glTF-original"
    assert list((tmp_path / ".optimizer-staging").iterdir()) == []


def test_command_may_write_target_directly(tmp_path, source):
    target = tmp_path / "optimized" / source.name
    optimizer = _optimizer(tmp_path, _python(COPY, "{input}", str(target)))

    assert asyncio.run(optimizer.optimize(source)) == target
    assert target.read_bytes() == b"glTF-original"


@pytest.mark.parametrize(
    "command",
    [
        _python("import sys; sys.exit(3)", "{input}", "{output}"),
        _python("pass", "{input}", "{output}"),
        ["/nonexistent/optimizer-binary", "{input}", "{output}"],
    ],
    ids=["exit-code", "no-output", "missing-binary"],
)
def test_failures_leave_no_variant(tmp_path, source, command):
    optimizer = _optimizer(tmp_path, command)

    assert asyncio.run(optimizer.optimize(source)) is None
    assert not (tmp_path / "optimized" / source.name).exists()


def test_run_raises_for_failures(tmp_path, source):
    optimizer = _optimizer(tmp_path, _python("import sys; sys.stderr.write('bad model'); sys.exit(1)"))

    with pytest.raises(OptimizerError, match="bad model"):
        asyncio.run(optimizer.run(source))


def test_timeout_kills_the_process(tmp_path, source):
    optimizer = _optimizer(
        tmp_path,
        _python("import time, shutil, sys; time.sleep(30); shutil.copyfile(sys.argv[1], sys.argv[2])", "{input}", "{output}"),
        timeout=0.5,
    )

    with pytest.raises(OptimizerTimeoutError):
        asyncio.run(optimizer.run(source))
    assert not (tmp_path / "optimized" / source.name).exists()


def test_failed_rerun_keeps_previous_variant(tmp_path, source):
    target = tmp_path / "optimized" / source.name
    target.parent.mkdir()
    target.write_bytes(b"previous")
    os.utime(target, (0, 0))
    optimizer = _optimizer(tmp_path, _python("import sys; sys.exit(1)"))

    assert asyncio.run(optimizer.optimize(source)) is None
    assert target.read_bytes() == b"previous"


def test_up_to_date_variant_is_not_rebuilt(tmp_path, source):
    target = tmp_path / "optimized" / source.name
    target.parent.mkdir()
    target.write_bytes(b"cached")
    stamp = source.stat().st_mtime + 10
    os.utime(target, (stamp, stamp))
    optimizer = _optimizer(tmp_path, _python("import sys; sys.exit(1)"))

    assert optimizer.is_current(source)
    assert asyncio.run(optimizer.optimize(source)) == target
    assert target.read_bytes() == b"cached"


def test_build_args_substitutes_placeholders(tmp_path, source):
    optimizer = _optimizer(tmp_path, ["gltf-transform", "optimize", "{input}", "{output}", "--compress=draco"])
    staged = optimizer.staging_dir / source.name

    assert optimizer.build_args(source, staged) == [
        "gltf-transform",
        "optimize",
        str(source),
        str(staged),
        "--compress=draco",
    ]


def test_queue_skips_unsupported_files(tmp_path):
    queue = OptimizationQueue(_optimizer(tmp_path, _python(COPY, "{input}", "{output}")))

    async def scenario():
        return queue.submit(tmp_path / "abc12345-audio.mp3")

    assert asyncio.run(scenario()) is None
    assert queue.pending == 0


def test_queue_runs_job_and_notifies_listeners(tmp_path, source):
    queue = OptimizationQueue(_optimizer(tmp_path, _python(COPY, "{input}", "{output}")))
    finished = []
    queue.add_listener(lambda src, result: finished.append((src, result)))

    async def scenario():
        first = queue.submit(source)
        second = queue.submit(source)
        assert first is second
        assert queue.pending == 1
        await queue.join()

    asyncio.run(scenario())

    assert finished == [(source, tmp_path / "optimized" / source.name)]
    assert queue.pending == 0


def test_queue_reports_failures_as_none(tmp_path, source):
    queue = OptimizationQueue(_optimizer(tmp_path, _python("import sys; sys.exit(2)")))
    finished = []
    queue.add_listener(lambda src, result: finished.append(result))

    async def scenario():
        queue.submit(source)
        await queue.join()

    asyncio.run(scenario())

    assert finished == [None]


def test_shutdown_cancels_pending_jobs(tmp_path, source):
    queue = OptimizationQueue(_optimizer(tmp_path, _python("import time; time.sleep(30)"), timeout=60))

    async def scenario():
        task = queue.submit(source)
        await asyncio.sleep(0.1)
        await queue.shutdown()
        return task

    task = asyncio.run(scenario())

    assert task.cancelled()
    assert queue.pending == 0


def test_format_size():
    assert format_size(512) == "512B"
    assert format_size(2048) == "2.0KB"
    assert format_size(3 * 1024 * 1024) == "3.0MB"


def test_staging_lives_outside_optimized_root(tmp_path, source):
    default = _optimizer(tmp_path, _python(COPY, "{input}", "{output}"))
    configured = _optimizer(tmp_path, _python(COPY, "{input}", "{output}"), staging_root=tmp_path / "work")

    assert default.staging_dir == tmp_path / ".optimizer-staging"
    assert configured.staging_dir == tmp_path / "work"

    script = "import os, shutil, sys; open(sys.argv[3], 'w').write(sys.argv[2]); shutil.copyfile(sys.argv[1], sys.argv[2])"
    record = tmp_path / "output-path.txt"
    configured.command = _python(script, "{input}", "{output}", str(record))
    assert asyncio.run(configured.optimize(source)) == tmp_path / "optimized" / source.name

    assert record.read_text() == str(tmp_path / "work" / source.name)
    assert not (tmp_path / "optimized" / ".staging").exists()


def test_cancelled_run_reaps_the_process(tmp_path, source):
    pid_file = tmp_path / "optimizer.pid"
    script = "import os, sys, time; open(sys.argv[1], 'w').write(str(os.getpid())); time.sleep(30)"
    optimizer = _optimizer(tmp_path, _python(script, str(pid_file)), timeout=60)

    async def scenario():
        task = asyncio.create_task(optimizer.run(source))
        for _ in range(200):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    pid = int(pid_file.read_text())
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
