import json

from task_api.generate_openapi import generate_openapi


def test_writes_schema_with_rpc_paths(tmp_path):
    out = tmp_path / "interfaces" / "openapi.json"
    path = generate_openapi(str(out))
    assert path == str(out)

    schema = json.loads(out.read_text(encoding="utf-8"))
    assert {"/rpc/createTask", "/rpc/getTasks", "/rpc/getTask", "/rpc/updateTask", "/rpc/deleteTask"} <= set(
        schema["paths"]
    )
    assert "tasks" in {t["name"] for t in schema["tags"]}
    assert "TaskUpdate" in schema["components"]["schemas"]
