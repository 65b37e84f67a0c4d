import json
import shutil

from click.testing import CliRunner

from balcloud.cli.main import main

SOURCE = "import ballerina/http;\n\nlistener http:Listener ep = new (8080);\n\nservice /api on ep {\n}\n"


def test_build_prints_instructions(make_project):
    project = make_project(SOURCE)
    result = CliRunner().invoke(main, ["build", str(project), "--output", str(project / "out")])
    assert result.exit_code == 0, result.output
    assert "Generating artifacts..." in result.output
    assert "kubectl apply -f" in result.output
    assert "kubectl expose deployment hello-deployment" in result.output
    assert (project / "out" / "kubernetes" / "hello" / "hello.yaml").exists()


def test_build_json_output(make_project):
    project = make_project(SOURCE)
    result = CliRunner().invoke(main, ["--json", "build", str(project), "--cloud", "docker",
                                       "--output", str(project / "out")])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["package"] == "hello"
    assert data["image"] == "hello:latest"
    assert data["instructions"][0]["command"] == "docker run -d -p 8080:8080 hello:latest"


def test_unsupported_cloud_option_exits_with_error(make_project):
    project = make_project(SOURCE)
    result = CliRunner().invoke(main, ["build", str(project), "--cloud", "aws"])
    assert result.exit_code == 1
    assert "error [balcloud]: Unsupported cloud option" in result.output


def test_invalid_cloud_toml_exits_with_error(make_project):
    project = make_project(SOURCE, cloud_toml='[container.image]\ntag = 3\n')
    result = CliRunner().invoke(main, ["build", str(project), "--output", str(project / "out")])
    assert result.exit_code == 1
    assert "container.image.tag" in result.output


def test_inspect_human_output(fixtures_dir, tmp_path):
    project = tmp_path / "hello_service"
    shutil.copytree(fixtures_dir / "hello_service", project)
    result = CliRunner().invoke(main, ["inspect", str(project)])
    assert result.exit_code == 0, result.output
    assert "Package: hello" in result.output
    assert "helloEP: <port>" in result.output
    assert "/hello on helloEP" in result.output
    assert "get greeting" in result.output


def test_inspect_json_output(fixtures_dir):
    result = CliRunner().invoke(main, ["--json", "inspect", str(fixtures_dir / "scheduled_task")])
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["package"] == "cleanup"
    assert data["intent"]["task"]["hours"] == "2"
    assert data["intent"]["services"] == []
