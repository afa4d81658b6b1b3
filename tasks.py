""" Invoke tasks. """
import sys
import io
from invoke.tasks import task

if isinstance(sys.stdout, io.TextIOWrapper):
    sys.stdout.reconfigure(encoding='utf-8')


@task
def install(c):
    c.run('pip install -e ".[test]"')


@task
def back(c):
    c.run("uvicorn main:app --reload --host 127.0.0.1 --port 8001")


@task
def test(c):
    c.run("pytest tests -v", env={"PYTHONUTF8": "1"})
