import json
from pathlib import Path

import pytest

from ocp_codegen.config import GeneratorOptions
from ocp_codegen.errors import GenerationError, SchemaNotFound, ValidationError
from ocp_codegen.pipeline import generate, run

FIXTURES = Path(__file__).parent / "fixtures"

ALL_FIXTURES = ["users_rest.json", "ledger_rpc.json", "blog_graphql.json", "chat_websocket.json"]


def _load(name):
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


def _files(root):
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestGenerate:
    @pytest.mark.parametrize("name", ALL_FIXTURES)
    def test_deterministic(self, name):
        assert generate(_load(name)) == generate(_load(name))

    def test_endpoint_order_follows_document(self):
        document = _load("users_rest.json")
        users = document["endpoints"]["users"]
        document["endpoints"]["users"] = {key: users[key] for key in ("get", "list", "create", "delete")}
        content = {a.path: a.content for a in generate(document)}["user_service/users_api.py"]
        assert content.index("    def get(") < content.index("    def list(")

    def test_renaming_a_group_only_renames_its_namespace(self):
        original = {a.path: a.content for a in generate(_load("users_rest.json"))}
        document = _load("users_rest.json")
        document["endpoints"] = {
            ("members" if key == "users" else key): value
            for key, value in document["endpoints"].items()
        }
        renamed = {a.path: a.content for a in generate(document)}

        assert "user_service/members_api.py" in renamed
        assert "user_service/users_api.py" not in renamed
        restored = (
            renamed["user_service/members_api.py"]
            .replace("MembersApi", "UsersApi")
            .replace("members group", "users group")
        )
        assert restored == original["user_service/users_api.py"]
        assert renamed["user_service/user_posts_api.py"] == original["user_service/user_posts_api.py"]
        assert renamed["user_service/types.py"] == original["user_service/types.py"]
        assert renamed["user_service/base.py"] == original["user_service/base.py"]

    def test_validation_error(self):
        with pytest.raises(ValidationError):
            generate({"$ocp": {"type": "rest"}})

    def test_package_name_option(self):
        paths = [a.path for a in generate(_load("ledger_rpc.json"), GeneratorOptions(package_name="ledger_sdk"))]
        assert paths[0] == "ledger_sdk/accounts_api.py"


class TestRun:
    def test_writes_every_artifact(self, tmp_path):
        written = run(FIXTURES / "users_rest.json", tmp_path)
        assert tmp_path / "user_service" / "users_api.py" in written
        assert (tmp_path / "user_service" / "requirements.txt").exists()

    def test_byte_identical_across_roots(self, tmp_path):
        run(FIXTURES / "blog_graphql.json", tmp_path / "one")
        run(FIXTURES / "blog_graphql.json", tmp_path / "two")
        assert _files(tmp_path / "one") == _files(tmp_path / "two")

    def test_rerun_is_idempotent(self, tmp_path):
        run(FIXTURES / "chat_websocket.json", tmp_path)
        first = _files(tmp_path)
        run(FIXTURES / "chat_websocket.json", tmp_path)
        assert _files(tmp_path) == first

    def test_yaml_schema(self, tmp_path):
        run(FIXTURES / "users_rest.yaml", tmp_path)
        assert (tmp_path / "user_service" / "users_api.py").exists()

    def test_nothing_written_for_invalid_schema(self, tmp_path):
        schema = tmp_path / "bad.json"
        schema.write_text(json.dumps({"$ocp": {"type": "soap", "version": "1"}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            run(schema, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_nothing_written_on_generation_error(self, tmp_path):
        document = _load("users_rest.json")
        document["endpoints"]["userPosts"]["health"]["response"] = "uuid"
        schema = tmp_path / "schema.json"
        schema.write_text(json.dumps(document), encoding="utf-8")
        with pytest.raises(GenerationError):
            run(schema, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_lone_surrogate_in_schema_text(self, tmp_path):
        schema = tmp_path / "schema.json"
        schema.write_text(
            '{"$ocp": {"type": "rest", "version": "1.0"},'
            ' "meta": {"name": "Api", "base_url": "https://x", "description": "\\ud800"},'
            ' "endpoints": {"users": {"get": {"method": "GET", "path": "/u"}}}}',
            encoding="utf-8",
        )
        with pytest.raises(GenerationError, match="cannot encode source as UTF-8"):
            run(schema, tmp_path / "out")
        assert not (tmp_path / "out").exists()

    def test_missing_schema(self, tmp_path):
        with pytest.raises(SchemaNotFound):
            run(tmp_path / "missing.json", tmp_path / "out")

    def test_prune_after_group_removed(self, tmp_path):
        run(FIXTURES / "users_rest.json", tmp_path)
        document = _load("users_rest.json")
        del document["endpoints"]["userPosts"]
        schema = tmp_path / "schema.json"
        schema.write_text(json.dumps(document), encoding="utf-8")
        run(schema, tmp_path, GeneratorOptions(prune=True))
        assert not (tmp_path / "user_service" / "user_posts_api.py").exists()
        assert (tmp_path / "user_service" / "users_api.py").exists()
