import suite
import typing
from datetime import datetime
from pyrsistent import PMap
from keyseries import Event, Time, TimeRange, Index, time_event, indexed_event, time_range_event, UNDEFINED
from keyseries.functions import sum, avg, max

assert_that = suite.assert_that

nested = {"a": {"b": 1, "c": 2}, "d": 3}


# --- construction and access ---

@suite.test("scalar data is stored under the default field")
def test_scalar_data():
    e = time_event(1000, 7)
    assert_that(e.get() == 7, f"default field should hold 7, got {e.get()}")
    assert_that(e.get_data() == {"value": 7}, "scalar should be wrapped as {'value': 7}")


@suite.test("event data is frozen into a persistent map")
def test_data_is_persistent():
    raw = {"a": 1}
    e = time_event(1000, raw)
    raw["a"] = 99
    assert_that(isinstance(e.get_data(), PMap), "data should be a pmap")
    assert_that(e.get("a") == 1, "mutating the source dict must not leak into the event")


@suite.test("get follows dotted names and path lists")
def test_get_paths():
    e = time_event(1000, nested)
    assert_that(e.get("a.b") == 1, "dotted path")
    assert_that(e.get(["a", "c"]) == 2, "list path")
    assert_that(e.get("d") == 3, "top-level field")
    assert_that(e.get("a.zz") is None, "absent nested field is None")
    assert_that(e.get("nope.deeper") is None, "absent parent is None")


@suite.test("get indexes into nested lists with digit segments")
def test_get_list_segment():
    e = time_event(1000, {"xs": [10, 20, 30]})
    assert_that(e.get("xs.1") == 20, "digit segment should index the list")
    assert_that(e.get("xs.7") is None, "out of range is None")


@suite.test("set returns a new event and leaves the original alone")
def test_set():
    e = time_event(1000, nested)
    updated = e.set("a.b", 10).set("x.y", 5)
    assert_that(e.get("a.b") == 1, "original should be unchanged")
    assert_that(updated.get("a.b") == 10, "nested value should be replaced")
    assert_that(updated.get("a.c") == 2, "siblings should survive")
    assert_that(updated.get("x.y") == 5, "missing parents should be created")


@suite.test("key accessors reflect the key type")
def test_key_accessors():
    t = time_event(1000, 1)
    r = time_range_event((0, 1000), 1)
    i = indexed_event("1d-1", 1)
    assert_that(t.key_type() == "time" and r.key_type() == "timerange" and i.key_type() == "index", "key types")
    assert_that(r.begin() == Time(0).timestamp() and r.end() == Time(1000).timestamp(), "range bounds")
    assert_that(r.timestamp() == Time(500).timestamp(), "range timestamp is the midpoint")
    assert_that(isinstance(i.get_key(), Index), "indexed event keeps its index")


@suite.test("key accessor annotations resolve")
def test_type_hints():
    hints = typing.get_type_hints(Event.timestamp)
    assert_that(hints["return"] is datetime, f"unexpected hints: {hints}")


@suite.test("is_valid checks all or selected fields")
def test_is_valid():
    e = time_event(1000, {"a": 1, "b": None, "c": float('nan')})
    assert_that(not e.is_valid(), "missing values make the event invalid")
    assert_that(e.is_valid("a"), "a alone is valid")
    assert_that(not e.is_valid(["a", "b"]), "b is None")
    assert_that(not e.is_valid("c"), "NaN counts as missing")
    assert_that(not e.is_valid("zz"), "absent fields are missing")


# --- projections ---

@suite.test("select keeps only the listed fields, nested paths stay nested")
def test_select():
    e = time_event(1000, nested)
    flat = e.select(["d"])
    deep = e.select(["a.b", "d"])
    assert_that(flat.get_data() == {"d": 3}, f"unexpected flat select: {flat.get_data()}")
    assert_that(deep.get_data() == {"a": {"b": 1}, "d": 3}, f"unexpected nested select: {deep.get_data()}")
    assert_that(deep.get_key() == e.get_key(), "select keeps the key")


@suite.test("collapse reduces fields of one event into a new field")
def test_collapse():
    e = time_event(1000, {"in": 2, "out": 3})
    replaced = e.collapse(["in", "out"], "total", sum())
    appended = e.collapse(["in", "out"], "total", sum(), append=True)
    assert_that(replaced.get_data() == {"total": 5}, f"unexpected collapse: {replaced.get_data()}")
    assert_that(appended.get_data() == {"in": 2, "out": 3, "total": 5}, "append should keep the inputs")
    assert_that(e.collapse(["in", "out"], "avg", avg()).get("avg") == 2.5, "avg collapse")


# --- static helpers ---

@suite.test("is_duplicate compares keys, and optionally values")
def test_is_duplicate():
    a = time_event(1000, {"v": 1})
    b = time_event(1000, {"v": 2})
    c = time_event(2000, {"v": 1})
    assert_that(Event.is_duplicate(a, b), "same key is a duplicate")
    assert_that(not Event.is_duplicate(a, b, ignore_values=False), "different values are not a full duplicate")
    assert_that(not Event.is_duplicate(a, c), "different keys are not duplicates")
    assert_that(not Event.is_duplicate(a, time_range_event((1000, 1000), {"v": 1})), "different key types")


@suite.test("merge combines fields of events sharing a key")
def test_merge_shallow():
    a = time_event(1000, {"x": 1, "n": {"p": 1}})
    b = time_event(1000, {"y": 2, "n": {"q": 2}})
    c = time_event(2000, {"x": 9})
    merged = Event.merge([a, b, c])
    assert_that(len(merged) == 2, f"expected one event per key, got {len(merged)}")
    assert_that(merged[0].get_data() == {"x": 1, "y": 2, "n": {"q": 2}}, f"shallow merge: {merged[0].get_data()}")
    assert_that(merged[1] == c, "lone events pass through")


@suite.test("deep merge combines nested maps")
def test_merge_deep():
    a = time_event(1000, {"n": {"p": 1}})
    b = time_event(1000, {"n": {"q": 2}})
    merged = Event.merge([a, b], deep=True)
    assert_that(merged[0].get_data() == {"n": {"p": 1, "q": 2}}, f"deep merge: {merged[0].get_data()}")


@suite.test("later fields win when merging")
def test_merge_later_wins():
    merged = Event.merge([time_event(1000, {"v": 1}), time_event(1000, {"v": 2})])
    assert_that(merged[0].get("v") == 2, "later value should win")


@suite.test("deduper merges one key and refuses several")
def test_deduper():
    dedup = Event.deduper()
    result = dedup([time_event(1000, {"a": 1}), time_event(1000, {"b": 2})])
    assert_that(result.get_data() == {"a": 1, "b": 2}, "deduper should merge")
    suite.assert_raises(ValueError, lambda: dedup([time_event(1000, 1), time_event(2000, 1)]), "mixed keys")


@suite.test("combine reduces each field across events sharing a key")
def test_combine():
    events = [
        time_event(1000, {"a": 1, "b": 10, "tag": "x"}),
        time_event(1000, {"a": 2, "b": 20, "tag": "y"}),
        time_event(2000, {"a": 5, "b": 50, "tag": "z"}),
    ]
    combined = Event.combine(events, sum(), ["a", "b"])
    assert_that(len(combined) == 2, "one event per key")
    assert_that(combined[0].get("a") == 3 and combined[0].get("b") == 30, f"summed: {combined[0].get_data()}")
    assert_that(combined[0].get("tag") == "x", "untouched fields come from the first event")
    assert_that(combined[1].get("a") == 5, "single events reduce to themselves")

    all_fields = Event.combiner(None, max())(events[:2])
    assert_that(all_fields[0].get("a") == 2 and all_fields[0].get("b") == 20, "combiner over every field")
    assert_that(all_fields[0].get("tag") is UNDEFINED, "max of strings is not a number")


@suite.test("map gathers field values per label")
def test_map():
    events = [time_event(1000, {"a": 1, "b": 2}), time_event(2000, {"a": 3})]
    assert_that(Event.map(events, "a") == {"a": [1, 3]}, "single field")
    assert_that(Event.map(events, ["a", "b"]) == {"a": [1, 3], "b": [2, None]}, "several fields")
    assert_that(Event.map(events, None) == {"a": [1, 3], "b": [2]}, "every top-level field")


@suite.test("aggregate applies a reducer to mapped values")
def test_event_aggregate():
    events = [time_event(1000, {"a": 1}), time_event(2000, {"a": 3})]
    assert_that(Event.aggregate(events, avg(), "a") == {"a": 2.0}, "avg of a")


# --- serialization and equality ---

@suite.test("to_json carries the key and the thawed data")
def test_to_json():
    assert_that(time_event(1000, {"a": 1}).to_json() == {"time": 1000, "data": {"a": 1}}, "time event json")
    assert_that(time_range_event((0, 5), 1).to_json() == {"timerange": [0, 5], "data": {"value": 1}}, "range json")
    assert_that(indexed_event("1d-1", 1).to_json() == {"index": "1d-1", "data": {"value": 1}}, "index json")
    assert_that(str(time_event(0, 1)) == '{"time": 0, "data": {"value": 1}}', "string form is json")


@suite.test("events are equal by key and data")
def test_equality():
    assert_that(time_event(1000, {"a": 1}) == time_event(1000, {"a": 1}), "same key and data")
    assert_that(time_event(1000, {"a": 1}) != time_event(1000, {"a": 2}), "different data")
    assert_that(time_event(1000, 1) != Event(TimeRange(1000, 1000), 1), "different key types")


if __name__ == "__main__":
    suite.run(title="keyseries event test suite")
