"""
Names, suffixes and defaults shared across artifact generation.
"""

DEPLOYMENT_POSTFIX = "-deployment"
SVC_POSTFIX = "-svc"
JOB_POSTFIX = "-job"
HPA_POSTFIX = "-hpa"
SECRET_POSTFIX = "-secure-socket"
PVC_POSTFIX = "-pvc"
DOCKER_LATEST_TAG = ":latest"

KUBERNETES_SELECTOR_KEY = "app"
KUBERNETES_SVC_PROTOCOL = "TCP"
DEFAULT_SERVICE_TYPE = "ClusterIP"
DEFAULT_IMAGE_PULL_POLICY = "IfNotPresent"
DEFAULT_BASE_IMAGE = "ballerina/jvm-runtime:2.0"
DEFAULT_PVC_SIZE = "1Gi"
DEFAULT_PVC_ACCESS_MODE = "ReadWriteOnce"
DEFAULT_HPA_CPU_PERCENTAGE = 50

YAML = ".yaml"
EXECUTABLE_JAR = ".jar"
SVC_FILE_POSTFIX = "_svc"
DEPLOYMENT_FILE_POSTFIX = "_deployment"
HPA_FILE_POSTFIX = "_hpa"
VOLUME_CLAIM_FILE_POSTFIX = "_volume_claim"
SECRET_FILE_POSTFIX = "_secret"
JOB_FILE_POSTFIX = "_job"

KUBERNETES_DIR = "kubernetes"
DOCKER_DIR = "docker"
DOCKERFILE = "Dockerfile"

CLOUD_K8S = "k8s"
CLOUD_DOCKER = "docker"

DOCKER_WORK_DIR = "/home/ballerina"
