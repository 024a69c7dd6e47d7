"""Tests for builds/builders.py module."""

from release_builder.builds.builders import CommandBuilder, build_env, default_builders
from release_builder.types import BuildOutput


class TestBuildEnv:
    """Tests for build_env function."""

    def test_env(self, manifest, workdir):
        env = build_env(manifest)
        assert env == {
            "VERSION": "1.20.0",
            "TAG": "1.20.0",
            "HUB": "docker.io/istio",
            "OUT_DIR": str(workdir / "out"),
        }

    def test_no_hub(self, manifest):
        env = build_env(manifest.model_copy(update={"docker_hub": None}))
        assert "HUB" not in env


class TestCommandBuilder:
    """Tests for CommandBuilder."""

    def test_runs_in_repo(self, manifest, fake_runner, workdir):
        builder = CommandBuilder(
            output=BuildOutput.DEBIAN,
            command=["make", "deb"],
            repo="istio",
            runner=fake_runner,
        )
        builder(manifest)

        assert fake_runner.calls == [(["make", "deb"], workdir / "sources" / "istio")]
        assert fake_runner.envs[0]["TAG"] == "1.20.0"


class TestDefaultBuilders:
    """Tests for default_builders function."""

    def test_one_per_output(self, settings, fake_runner):
        builders = default_builders(settings, fake_runner)
        assert set(builders) == set(BuildOutput)
        assert builders[BuildOutput.DOCKER].command == ["make", "docker.save"]
        assert all(b.repo == "istio" for b in builders.values())
