import pytest

from balcloud.config import CloudToml
from balcloud.context import BuildContext
from balcloud.errors import BuildError
from balcloud.extractor import extract_intent
from balcloud.models import CopyFileModel
from balcloud.overrides import apply_overrides, resolve_copy_files
from balcloud.populate import populate_deployment_model
from balcloud.project import PackageIdentity
from balcloud.syntax import parse_module

SERVICE_SOURCE = "listener http:Listener ep = new (9090);\n"


def make_context(tmp_path, data, source=SERVICE_SOURCE, **kw):
    ctx = BuildContext(
        project_dir=tmp_path,
        output_dir=tmp_path / "target",
        package=PackageIdentity(org="example", name="hello"),
        intent=extract_intent(parse_module(source)),
        cloud_toml=CloudToml(data),
        jar_path=tmp_path / "hello.jar",
        **kw,
    )
    populate_deployment_model(ctx)
    return ctx


def test_image_name_and_tag_override(tmp_path):
    ctx = make_context(tmp_path, {"container": {"image": {"name": "myorg/app", "tag": "v2"}}})
    apply_overrides(ctx)
    assert ctx.docker_model.image == "myorg/app:v2"
    assert ctx.deployment_model.image == "myorg/app:v2"


def test_repository_and_base_image(tmp_path):
    data = {"container": {"image": {"repository": "registry.example.com", "base": "eclipse-temurin:17-jre"}}}
    ctx = make_context(tmp_path, data)
    apply_overrides(ctx)
    assert ctx.deployment_model.image == "registry.example.com/hello:latest"
    assert ctx.deployment_model.registry == "registry.example.com"
    assert ctx.docker_model.base_image == "eclipse-temurin:17-jre"


def test_absent_keys_keep_defaults(tmp_path):
    ctx = make_context(tmp_path, {})
    apply_overrides(ctx)
    assert ctx.deployment_model.image == "hello:latest"
    assert ctx.deployment_model.single_yaml is True
    assert ctx.docker_model.build_image is False


def test_overrides_are_idempotent(tmp_path):
    (tmp_path / "data.txt").write_text("x")
    data = {
        "container": {
            "image": {"repository": "reg", "name": "app", "tag": "v1"},
            "copy": {"files": [{"sourceFile": "data.txt", "target": "/home/ballerina/data.txt"}]},
        },
        "cloud": {
            "deployment": {"storage": {"volumes": [{"name": "data", "local_path": "/data", "size": "2Gi"}]}},
            "config": {"envs": [{"key_ref": "HOST", "config_name": "app-config"}]},
        },
    }
    ctx = make_context(tmp_path, data)
    apply_overrides(ctx)
    first = (ctx.docker_model.image, set(ctx.docker_model.copy_files),
             list(ctx.deployment_model.volume_claims), list(ctx.deployment_model.env_vars))
    apply_overrides(ctx)
    second = (ctx.docker_model.image, set(ctx.docker_model.copy_files),
              list(ctx.deployment_model.volume_claims), list(ctx.deployment_model.env_vars))
    assert first == second
    assert ctx.docker_model.image == "reg/app:v1"


def test_copy_files_collapse_duplicates(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    entry = {"sourceFile": "a.txt", "target": "/tmp/a.txt"}
    copies = resolve_copy_files(CloudToml({"container": {"copy": {"files": [entry, dict(entry)]}}}), tmp_path)
    assert set(copies) == {CopyFileModel(str((tmp_path / "a.txt").resolve()), "/tmp/a.txt")}


def test_copy_file_missing_source_is_fatal(tmp_path):
    data = {"container": {"copy": {"files": [{"sourceFile": "nope.txt", "target": "/tmp/nope.txt"}]}}}
    ctx = make_context(tmp_path, data)
    with pytest.raises(BuildError):
        apply_overrides(ctx)


def test_copy_file_blank_target_is_fatal(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    data = {"container": {"copy": {"files": [{"sourceFile": "a.txt", "target": "  "}]}}}
    with pytest.raises(BuildError):
        apply_overrides(make_context(tmp_path, data))


def test_wrong_value_type_is_fatal(tmp_path):
    with pytest.raises(BuildError):
        apply_overrides(make_context(tmp_path, {"container": {"image": {"tag": 2}}}))


def test_deployment_resources_probes_and_autoscaling(tmp_path):
    data = {"cloud": {"deployment": {
        "min_memory": "100Mi", "max_cpu": "500m",
        "autoscaling": {"min_replicas": 2, "max_replicas": 4, "cpu": 70, "memory": 80},
        "probes": {"liveness": {"port": 9090, "path": "/health"}},
    }}}
    ctx = make_context(tmp_path, data)
    apply_overrides(ctx)
    deployment = ctx.deployment_model
    assert deployment.min_memory == "100Mi"
    assert deployment.max_cpu == "500m"
    assert deployment.replicas == 2
    assert deployment.pod_autoscaler.max_replicas == 4
    assert deployment.pod_autoscaler.memory_percentage == 80
    assert deployment.liveness_probe.path == "/health"
    assert deployment.readiness_probe is None


def test_probe_without_port_is_fatal(tmp_path):
    with pytest.raises(BuildError):
        apply_overrides(make_context(tmp_path, {"cloud": {"deployment": {"probes": {"readiness": {"path": "/"}}}}}))


def test_secret_envs(tmp_path):
    data = {"cloud": {"secret": {"envs": [{"key_ref": "PASSWORD", "name": "DB_PASSWORD", "secret_name": "db"}]}}}
    ctx = make_context(tmp_path, data)
    apply_overrides(ctx)
    env = ctx.deployment_model.env_vars[0]
    assert (env.name, env.key, env.secret_name, env.config_map_name) == ("DB_PASSWORD", "PASSWORD", "db", None)


def test_settings_flags(tmp_path):
    ctx = make_context(tmp_path, {"settings": {"singleYAML": False, "buildImage": True}})
    apply_overrides(ctx)
    assert ctx.deployment_model.single_yaml is False
    assert ctx.docker_model.build_image is True


def test_build_image_option_wins_over_settings(tmp_path):
    ctx = make_context(tmp_path, {"settings": {"buildImage": True}}, build_image=False)
    apply_overrides(ctx)
    assert ctx.docker_model.build_image is False


def test_job_model_follows_image_overrides(tmp_path):
    source = '@cloud:Task {schedule: {minutes: "0"}}\npublic function main() {\n}\n'
    ctx = make_context(tmp_path, {"container": {"image": {"name": "cron", "tag": "v3"}},
                                  "settings": {"singleYAML": False}}, source=source)
    apply_overrides(ctx)
    assert ctx.job_model.image == "cron:v3"
    assert ctx.job_model.single_yaml is False


def test_push_image_setting(tmp_path):
    ctx = make_context(tmp_path, {"settings": {"pushImage": True}})
    apply_overrides(ctx)
    assert ctx.docker_model.push is True
    assert ctx.deployment_model.push is True
