from unittest.mock import patch
import subprocess

import pytest

from balcloud.constants import DOCKER_WORK_DIR
from balcloud.context import BuildContext
from balcloud.errors import BuildError
from balcloud.extractor import extract_intent
from balcloud.handlers import (
    JOB_HANDLERS,
    SERVICE_HANDLERS,
    DeploymentHandler,
    DockerHandler,
    HorizontalPodAutoscalerHandler,
    JobHandler,
    PersistentVolumeClaimHandler,
    SecretHandler,
    ServiceHandler,
    build_image,
    push_image,
    handlers_for,
)
from balcloud.handlers.docker import generate_dockerfile
from balcloud.models import DockerModel, PersistentVolumeClaimModel, SecretModel
from balcloud.populate import populate_deployment_model
from balcloud.project import PackageIdentity
from balcloud.syntax import parse_module

SERVICE_SOURCE = """
listener http:Listener ep = new (9090);
service /hello on ep {
    resource function get greeting() returns string { return "hi"; }
}
"""
TASK_SOURCE = '@cloud:Task {schedule: {minutes: "0", hours: "2"}}\npublic function main() {\n}\n'


def make_context(tmp_path, source=SERVICE_SOURCE):
    ctx = BuildContext(
        project_dir=tmp_path,
        output_dir=tmp_path / "target",
        package=PackageIdentity(org="example", name="hello"),
        intent=extract_intent(parse_module(source)),
        jar_path=tmp_path / "hello.jar",
    )
    populate_deployment_model(ctx)
    return ctx


def test_handler_order():
    assert SERVICE_HANDLERS == [
        ServiceHandler,
        PersistentVolumeClaimHandler,
        SecretHandler,
        DeploymentHandler,
        HorizontalPodAutoscalerHandler,
        DockerHandler,
    ]
    assert JOB_HANDLERS == [JobHandler, DockerHandler]


def test_handlers_for_job_mode(tmp_path):
    ctx = make_context(tmp_path, TASK_SOURCE)
    assert [type(h) for h in handlers_for(ctx)] == [JobHandler, DockerHandler]


def test_service_manifest(tmp_path):
    ctx = make_context(tmp_path)
    artifact = ServiceHandler().create_artifacts(ctx)
    assert artifact.file_suffix == "_svc"
    svc = artifact.documents[0]
    assert svc["kind"] == "Service"
    assert svc["metadata"]["name"] == "hello-svc"
    assert svc["spec"]["selector"] == {"app": "hello"}
    assert svc["spec"]["ports"] == [{"name": "port-1-hello", "port": 9090, "targetPort": 9090, "protocol": "TCP"}]


def test_service_handler_without_services(tmp_path):
    ctx = make_context(tmp_path, "")
    assert ServiceHandler().create_artifacts(ctx) is None


def test_deployment_registers_service_ports_and_refreshes_docker(tmp_path):
    ctx = make_context(tmp_path)
    artifact = DeploymentHandler().create_artifacts(ctx)
    manifest = artifact.documents[0]
    container = manifest["spec"]["template"]["spec"]["containers"][0]
    assert manifest["metadata"]["name"] == "hello-deployment"
    assert manifest["spec"]["selector"]["matchLabels"] == {"app": "hello"}
    assert container["image"] == "hello:latest"
    assert container["ports"] == [{"name": "port-1-hello", "containerPort": 9090, "protocol": "TCP"}]
    assert ctx.docker_model.ports == {s.target_port for s in ctx.service_models}
    assert ctx.docker_model.image == ctx.deployment_model.image


def test_deployment_ports_are_not_duplicated(tmp_path):
    ctx = make_context(tmp_path)
    DeploymentHandler().create_artifacts(ctx)
    DeploymentHandler().create_artifacts(ctx)
    assert len(ctx.deployment_model.ports) == 1


def test_deployment_requires_image(tmp_path):
    ctx = make_context(tmp_path)
    ctx.deployment_model.image = None
    with pytest.raises(BuildError):
        DeploymentHandler().create_artifacts(ctx)


def test_deployment_mounts_claims_and_secrets(tmp_path):
    ctx = make_context(tmp_path)
    ctx.deployment_model.volume_claims.append(PersistentVolumeClaimModel(name="data-pvc", mount_path="/data"))
    ctx.deployment_model.secrets.append(SecretModel(name="ep-secure-socket", mount_path="/certs", data={"a": b"x"}))
    pod = DeploymentHandler().create_artifacts(ctx).documents[0]["spec"]["template"]["spec"]
    mounts = pod["containers"][0]["volumeMounts"]
    assert {"name": "data-pvc-volume", "mountPath": "/data", "readOnly": False} in mounts
    assert {"name": "ep-secure-socket-volume", "mountPath": "/certs/a", "subPath": "a", "readOnly": True} in mounts
    assert {"name": "data-pvc-volume", "persistentVolumeClaim": {"claimName": "data-pvc"}} in pod["volumes"]


def test_pvc_and_secret_handlers(tmp_path):
    ctx = make_context(tmp_path)
    assert PersistentVolumeClaimHandler().create_artifacts(ctx) is None
    assert SecretHandler().create_artifacts(ctx) is None

    ctx.deployment_model.volume_claims.append(PersistentVolumeClaimModel(name="data-pvc", mount_path="/data"))
    ctx.deployment_model.secrets.append(SecretModel(name="s", mount_path="/certs", data={"cert.pem": b"CERT"}))
    pvc = PersistentVolumeClaimHandler().create_artifacts(ctx).documents[0]
    assert pvc["spec"]["resources"]["requests"]["storage"] == "1Gi"
    secret = SecretHandler().create_artifacts(ctx).documents[0]
    assert secret["data"] == {"cert.pem": "Q0VSVA=="}


def test_hpa_defaults(tmp_path):
    ctx = make_context(tmp_path)
    hpa = HorizontalPodAutoscalerHandler().create_artifacts(ctx).documents[0]
    assert hpa["metadata"]["name"] == "hello-hpa"
    assert hpa["spec"]["scaleTargetRef"]["name"] == "hello-deployment"
    assert (hpa["spec"]["minReplicas"], hpa["spec"]["maxReplicas"]) == (1, 2)
    assert hpa["spec"]["metrics"][0]["resource"]["target"]["averageUtilization"] == 50


def test_hpa_disabled_and_invalid(tmp_path):
    ctx = make_context(tmp_path)
    ctx.deployment_model.pod_autoscaler.enabled = False
    assert HorizontalPodAutoscalerHandler().create_artifacts(ctx) is None

    ctx.deployment_model.pod_autoscaler.enabled = True
    ctx.deployment_model.pod_autoscaler.min_replicas = 3
    ctx.deployment_model.pod_autoscaler.max_replicas = 2
    with pytest.raises(BuildError):
        HorizontalPodAutoscalerHandler().create_artifacts(ctx)


def test_job_handler_emits_cronjob(tmp_path):
    ctx = make_context(tmp_path, TASK_SOURCE)
    artifact = JobHandler().create_artifacts(ctx)
    job = artifact.documents[0]
    assert artifact.file_suffix == "_job"
    assert job["kind"] == "CronJob"
    assert job["apiVersion"] == "batch/v1"
    assert job["spec"]["schedule"] == "0 2 * * *"
    pod = job["spec"]["jobTemplate"]["spec"]["template"]["spec"]
    assert pod["restartPolicy"] == "OnFailure"
    assert pod["containers"][0]["image"] == "hello:latest"


def test_job_handler_without_task(tmp_path):
    assert JobHandler().create_artifacts(make_context(tmp_path)) is None


def test_dockerfile_contents(tmp_path):
    ctx = make_context(tmp_path)
    DeploymentHandler().create_artifacts(ctx)
    artifact = DockerHandler().create_artifacts(ctx)
    assert "FROM ballerina/jvm-runtime:2.0" in artifact.text
    assert "COPY hello.jar /home/ballerina" in artifact.text
    assert "EXPOSE  9090" in artifact.text
    assert 'CMD java -Xdiag -jar "hello.jar"' in artifact.text
    # jar does not exist yet
    assert artifact.context_files == {}


def test_dockerfile_copies_jar_and_files(tmp_path):
    (tmp_path / "hello.jar").write_bytes(b"jar")
    ctx = make_context(tmp_path)
    docker = DockerModel(name="hello", jar_file_name="hello.jar", ports={9091, 9090})
    text = generate_dockerfile(docker, {"conf": "/home/ballerina/conf"})
    assert "EXPOSE  9090 9091" in text
    assert "COPY conf /home/ballerina/conf" in text
    artifact = DockerHandler().create_artifacts(ctx)
    assert artifact.context_files == {str(tmp_path / "hello.jar"): "hello.jar"}


def test_build_image_runs_docker(tmp_path):
    docker = DockerModel(name="hello", tag="v1")
    with patch("balcloud.handlers.docker.subprocess.run") as run:
        build_image(docker, tmp_path)
    args = run.call_args[0][0]
    assert args[:2] == ["docker", "build"]
    assert "hello:v1" in args
    assert args[-1] == str(tmp_path)


def test_build_image_failure_is_fatal(tmp_path):
    docker = DockerModel(name="hello")
    error = subprocess.CalledProcessError(1, ["docker", "build"])
    with patch("balcloud.handlers.docker.subprocess.run", side_effect=error):
        with pytest.raises(BuildError):
            build_image(docker, tmp_path)


def test_secret_in_work_dir_mounts_single_files(tmp_path):
    ctx = make_context(tmp_path)
    ctx.deployment_model.secrets.append(SecretModel(
        name="ep-secure-socket", mount_path=DOCKER_WORK_DIR, data={"cert.pem": b"C", "key.pem": b"K"}))
    pod = DeploymentHandler().create_artifacts(ctx).documents[0]["spec"]["template"]["spec"]
    mounts = pod["containers"][0]["volumeMounts"]
    assert [m["mountPath"] for m in mounts] == [f"{DOCKER_WORK_DIR}/cert.pem", f"{DOCKER_WORK_DIR}/key.pem"]
    assert [m["subPath"] for m in mounts] == ["cert.pem", "key.pem"]
    assert all(m["mountPath"] != DOCKER_WORK_DIR for m in mounts)
    assert pod["volumes"] == [{"name": "ep-secure-socket-volume", "secret": {"secretName": "ep-secure-socket"}}]


def test_push_image_runs_docker_push(tmp_path):
    docker = DockerModel(name="hello", tag="v1", registry="reg.io")
    with patch("balcloud.handlers.docker.subprocess.run") as run:
        push_image(docker)
    assert run.call_args[0][0] == ["docker", "push", "reg.io/hello:v1"]


def test_push_image_without_docker_is_fatal():
    with patch("balcloud.handlers.docker.subprocess.run", side_effect=FileNotFoundError("docker")):
        with pytest.raises(BuildError):
            push_image(DockerModel(name="hello"))
