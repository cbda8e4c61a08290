""" Invoke tasks. """
import os
import sys
import io
from invoke.tasks import task

if isinstance(sys.stdout, io.TextIOWrapper):
    sys.stdout.reconfigure(encoding='utf-8')


@task
def install(c):
    c.run('pip install -e ".[test]"')


@task
def serve(c, host="127.0.0.1", port=8000):
    c.run(f"uvicorn main:app --reload --host {host} --port {port}", env={"PYTHONUTF8": "1"})


@task
def test(c, k=""):
    """Run the pytest suite; `-k` narrows it to matching tests."""
    c.run(f"pytest -q {'-k ' + repr(k) if k else ''}".strip(), env={"PYTHONUTF8": "1"})


@task
def clean(c):
    """
    Cross-platform clean task to remove all __pycache__ folders, .pyc files and the run log.
    """
    if os.name == 'nt':  # Windows
        c.run("for /R %f in (*.pyc) do del /F /Q \"%f\"", warn=True)
        c.run('for /d /r %d in (__pycache__) do @if exist "%d" rmdir /s /q "%d"', warn=True)
        c.run("if exist schedule_run.log del /F /Q schedule_run.log", warn=True)
    else:  # Unix/Linux/macOS
        c.run("find . -type f -name '*.pyc' -delete", warn=True)
        c.run("find . -type d -name '__pycache__' -exec rm -r {} +", warn=True)
        c.run("rm -f schedule_run.log", warn=True)
