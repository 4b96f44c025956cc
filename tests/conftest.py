import pytest


SAMPLE_FILES = {
	"pyproject.toml": '[project]\nname = "proj"\n',
	"cli.py": "import argparse\n\nfrom app import core\n\n\ndef main():\n\tcore.run()\n",
	"app/__init__.py": "",
	"app/core.py": '"""Core logic for the app. More detail."""\n\nfrom app.helpers import shout\n\n\ndef run():\n\treturn shout("hi")\n',
	"app/helpers.py": "def shout(text):\n\treturn text.upper()\n",
	"tests/test_core.py": 'from app.core import run\n\n\ndef test_run():\n\tassert run() == "HI"\n',
	".hidden/secret.py": "SECRET = 1\n",
	"node_modules/pkg/index.js": "module.exports = {};\n",
	".env": "TOKEN=x\n",
}


@pytest.fixture
def project(tmp_path):
	root = tmp_path / "proj"
	for rel, content in SAMPLE_FILES.items():
		path = root / rel
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(content)
	return root
