import asyncio

import pytest

from loaderkit.exceptions import InstallerSubprocessError, MissingRuntimeError
from loaderkit.services.java import (
    JavaLocator,
    SystemJavaLocator,
    parse_major_version,
    parse_version_output,
)
from loaderkit.services.process import ProcessResult

from conftest import FakeJavaLocator, java


JAVA_17_OUTPUT = (
    'openjdk version "17.0.2" 2022-01-18\n'
    "OpenJDK Runtime Environment (build 17.0.2+8-86)\n"
    "OpenJDK 64-Bit Server VM (build 17.0.2+8-86, mixed mode, sharing)\n"
)


@pytest.mark.parametrize(
    "version, major",
    [("1.8.0_292", 8), ("17.0.2", 17), ("21", 21), ("11.0.21+9", 11), ("garbage", 0)],
)
def test_parse_major_version(version, major):
    assert parse_major_version(version) == major


def test_parse_version_output():
    assert parse_version_output(JAVA_17_OUTPUT) == "17.0.2"
    assert parse_version_output('java version "1.8.0_292"') == "1.8.0_292"
    assert parse_version_output("command not found") is None


def test_select_prefers_modern_java():
    locator = FakeJavaLocator([java("/jdk8/bin/java", 8), java("/jdk17/bin/java", 17)])

    assert asyncio.run(locator.select(17)).path == "/jdk17/bin/java"


def test_select_falls_back_to_first():
    locator = FakeJavaLocator([java("/jdk8/bin/java", 8)])

    assert asyncio.run(locator.select(17)).path == "/jdk8/bin/java"


def test_select_without_java():
    with pytest.raises(MissingRuntimeError):
        asyncio.run(FakeJavaLocator([]).select())


class VersionRunner:
    def __init__(self, output=JAVA_17_OUTPUT, error=None):
        self.output = output
        self.error = error
        self.calls = []

    async def run(self, args, cwd=None, timeout=None):
        self.calls.append(list(args))
        if self.error is not None:
            raise self.error
        return ProcessResult(0, stdout="", stderr=self.output)


def test_probe_parses_java_version(tmp_path):
    executable = tmp_path / "java"
    executable.write_text("")
    runner = VersionRunner()
    locator = SystemJavaLocator(runner=runner)

    installation = asyncio.run(locator.probe(str(executable)))

    assert installation.version == "17.0.2"
    assert installation.major_version == 17
    assert installation.architecture == "x64"
    assert runner.calls == [[str(executable), "-version"]]


def test_probe_ignores_missing_or_broken_java(tmp_path):
    executable = tmp_path / "java"
    executable.write_text("")
    locator = SystemJavaLocator(runner=VersionRunner(error=InstallerSubprocessError("exec failed")))

    assert asyncio.run(locator.probe(str(tmp_path / "nope"))) is None
    assert asyncio.run(locator.probe(str(executable))) is None


def test_locator_requires_detect():
    class Incomplete(JavaLocator):
        pass

    with pytest.raises(TypeError):
        Incomplete()
