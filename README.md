# defender

`defender` is the inspection core of a rule-driven web application
firewall. Given an HTTP request or a backend response, it works out the
value a *target* points at, runs it through optional *engines*, and tests
it with a rule's *comparator*.

## Building blocks

- `defender.exchange` – the `Request` and `Response` objects the engine
  reads, with multi-valued, canonical-key `Headers`. A `Request` also
  carries per-request values (`get_int`, `get_string`, `set`).
- `defender.models` – the definitions a manager pushes: `Group`, `Rule`,
  `Target`, `Wordlist`, `Word`, `Decision`, and the payload shapes
  `Application`, `Revocation`, `Implementation` and `Suspension`. Each
  model has `from_dict`; the single models also have `to_dict`.
  `Store` holds them by id: `Store.add` inserts items whose id is not yet
  present, `Store.remove` deletes by id, `Store.words_of` lists a
  wordlist's words and `Store.refresh_groups` rebuilds the groups ordered
  by execution order.
- `defender.request_targets` and `defender.request_bodies` – built-in
  targets read from the request: header and query keys and values, port,
  client IP, method, path, scheme, host, raw headers, and the fields of
  JSON, XML, YAML, URL-encoded and multipart bodies, including uploaded
  file names, contents, sizes and extensions (detected from the file's
  leading bytes, falling back to the file name).
- `defender.response_targets` – built-in targets read from the response:
  headers, status, protocol and the fields of a structured body.
- `defender.payloads` – the full raw text of a request or response.
- `defender.bodies` – flattening of nested data into dotted keys,
  gzip/deflate/zlib/brotli/zstd decoding and encoding, and parsing of
  JSON, XML, YAML and HTML bodies by content type.
- `defender.engines` – value transformations: `index_of`, arithmetic
  (`addition`, `subtraction`, `multiplication`, `division`, `power_of`,
  `remainder`), string changes (`lower`, `upper`, `capitalize`, `trim`,
  `trim_left`, `trim_right`, `remove_whitespace`), `length` and
  `hash_value` (md5, sha128 meaning SHA-1, sha256, sha512).
- `defender.lookup` – user-defined targets (header, query argument, body
  field, file, or per-request getter) of datatype array, number or
  string, and the chain of linked targets from a root.
- `defender.resolver` – `process_target` turns a target id into the list
  of targets involved and the resolved value, following chains and
  applying each link's engine; the value is `None` when it cannot be
  obtained.
- `defender.comparators` – `compare` picks a comparator by the value's
  type and the rule's name: `@similar`, `@contains`, `@match`, `@search`
  for lists; `@equal`, `@greaterThan`, `@greaterThanOrEqual`,
  `@lessThan`, `@lessThanOrEqual`, `@inRange` for numbers; `@mirror`,
  `@startsWith`, `@endsWith`, `@check`, `@regex`, `@checkRegex` for
  strings. A rule's `inverse` flag flips the result.
- `defender.errorlog` – problems met while resolving targets or comparing
  are appended to `<path>.log` once `defender.errorlog.configure(True,
  path)` has been called; otherwise they are dropped.
- `defender.files` and `defender.prompt` – file and log helpers, coloured
  `[Module][Field][Kind]: message` errors and strict string-to-bool,
  int and float parsers.

## Example

```python
from defender.comparators import compare
from defender.exchange import Request
from defender.models import Rule, Store, Target
from defender.resolver import process_target

store = Store()
store.add("targets", [Target.from_dict({
    "id": 10, "name": "path", "alias": "url-path",
    "phase": 1, "immutable": True,
})])

rule = Rule.from_dict({
    "id": 1, "name": "admin path", "alias": "admin-path", "phase": 1,
    "target_id": 10, "comparator": "@startsWith", "value": "/admin",
    "action": "deny",
})

request = Request(method="GET", path="/admin/users")
path, value = process_target(request, request, rule.target_id, store)
print(value)                         # /admin/users
print(compare(value, rule, store))   # True
```

## What this package does not do

It resolves and compares; it does not act. There is no reverse proxy or
HTTP server, no management API, no evaluation of groups in order with
violation levels and scores, no rule actions (allow, deny, scoring,
outbound requests, reports, headers) and no decisions (deny, redirect,
kill, tag, warn). It keeps its definitions in memory only, with no
persistent storage, and it has no loading or validation of proxy and
security settings. Rule and decision audit records are not produced,
although `defender.files.write_audit` can append lines to an audit file.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```