import pytest

from defender import engines
from defender.errorlog import configure
from defender.exchange import Headers, Request, Response
from defender.models import Store, Target, Word
from defender.resolver import (
    process_immutable_target,
    process_mutable_target,
    process_referer_target,
    process_target,
)


def make_target(**overrides):
    data = {
        "id": 1,
        "name": "",
        "alias": "",
        "type": "header",
        "engine": None,
        "engine_configuration": None,
        "phase": 1,
        "datatype": "string",
        "final_datatype": "string",
        "immutable": False,
        "target_id": None,
        "wordlist_id": None,
    }
    data.update(overrides)
    return Target.from_dict(data)


def make_store(targets=(), words=()):
    store = Store()
    for target in targets:
        store.targets[target.id] = target
    for word in words:
        store.words[word.id] = word
    return store


@pytest.fixture
def error_log(tmp_path):
    configure(True, str(tmp_path / "errors"))
    yield tmp_path / "errors.log"
    configure(False, "")


def test_immutable_request_path():
    request = Request(path="/login")
    target = make_target(alias="url-path", name="path", immutable=True)
    assert process_immutable_target(request, target) == "/login"


def test_immutable_response_header_keys():
    response = Response(headers=Headers({"X-Served": "edge"}))
    target = make_target(
        alias="header-keys-response", name="keys", phase=3, immutable=True
    )
    assert process_immutable_target(response, target) == ["x-served"]


def test_immutable_unknown_alias_is_none():
    target = make_target(alias="nothing", immutable=True)
    assert process_immutable_target(Request(), target) is None


def test_immutable_phase_not_for_context_is_none():
    target = make_target(
        alias="header-keys-response", name="keys", phase=3, immutable=True
    )
    assert process_immutable_target(Request(), target) is None


def test_mutable_unknown_datatype_is_none():
    target = make_target(datatype="object")
    assert process_mutable_target(Request(), Request(), target, make_store()) is None


def test_mutable_string_reads_header():
    request = Request(headers=Headers({"X-Name": "value"}))
    target = make_target(name="x-name")
    assert process_mutable_target(request, request, target, make_store()) == "value"


def test_process_target_unknown_id():
    assert process_target(Request(), Request(), 3, make_store()) == ([], None)


def test_process_target_immutable_in_store():
    target = make_target(id=8, alias="client-method", name="method", immutable=True)
    request = Request(method="POST")
    path, value = process_target(request, request, 8, make_store([target]))
    assert [t.id for t in path] == [8]
    assert value == "post"


def test_process_target_unsupported_type():
    target = make_target(id=2, type="other")
    assert process_target(Request(), Request(), 2, make_store([target])) == ([], None)


def test_referer_chain_applies_each_engine_in_order():
    store = make_store(
        [
            make_target(id=1, name="x-name"),
            make_target(id=2, type="target", target_id=1, engine="trim"),
            make_target(
                id=3,
                type="target",
                target_id=2,
                engine="length",
                final_datatype="number",
            ),
        ]
    )
    request = Request(headers=Headers({"X-Name": " Hello "}))
    path, value = process_target(request, request, 3, store)
    assert [t.id for t in path] == [1, 2, 3]
    assert value == engines.length(engines.trim(" Hello "))


def test_referer_number_chain():
    store = make_store(
        [
            make_target(id=1, name="x-n", datatype="number", final_datatype="number"),
            make_target(
                id=2,
                type="target",
                target_id=1,
                engine="multiplication",
                engine_configuration="2.5",
                final_datatype="number",
            ),
        ]
    )
    request = Request(headers=Headers({"X-N": "4"}))
    _, value = process_referer_target(request, request, 2, store)
    assert value == engines.multiplication(4.0, 2.5)


def test_referer_array_chain_index_of():
    store = make_store(
        [
            make_target(id=1, datatype="array", wordlist_id=5, final_datatype="array"),
            make_target(
                id=2,
                type="target",
                target_id=1,
                engine="indexOf",
                engine_configuration="1",
            ),
        ],
        [
            Word.from_dict({"id": 1, "content": "x-a", "wordlist_id": 5}),
            Word.from_dict({"id": 2, "content": "x-b", "wordlist_id": 5}),
        ],
    )
    request = Request(headers=Headers({"X-A": "alpha", "X-B": "beta"}))
    _, value = process_referer_target(request, request, 2, store)
    assert value in ("alpha", "beta")
    root_path, root_value = process_target(request, request, 1, store)
    assert value == engines.index_of(root_value, 1)


def test_referer_bad_configuration_logged_with_chain_id(error_log):
    store = make_store(
        [
            make_target(id=1, name="x-n", datatype="number"),
            make_target(
                id=2,
                type="target",
                target_id=1,
                engine="addition",
                engine_configuration="lots",
                final_datatype="number",
            ),
        ]
    )
    request = Request(headers=Headers({"X-N": "4"}))
    _, value = process_referer_target(request, request, 2, store)
    assert value == 4.0
    assert "[Proxy][Target]: Target 2:" in error_log.read_text()


def test_referer_missing_target_logged(error_log):
    path, value = process_referer_target(Request(), Request(), 99, make_store())
    assert (path, value) == ([], None)
    assert "Target 99: not found Target" in error_log.read_text()


def test_referer_root_without_value_stops():
    store = make_store(
        [
            make_target(id=1, datatype="object"),
            make_target(id=2, type="target", target_id=1, engine="upper"),
        ]
    )
    path, value = process_referer_target(Request(), Request(), 2, store)
    assert [t.id for t in path] == [1, 2]
    assert value is None