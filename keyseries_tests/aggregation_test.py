import suite
from keyseries import collection, time_event, Filter, UNDEFINED, InterpolationType, functions

assert_that = suite.assert_that
assert_close = suite.assert_close


def ramp_collection(values, field="value"):
    return collection([time_event(1000 * (i + 1), {field: v}) for i, v in enumerate(values)])


readings = collection([
    time_event(1000, {"in": 1, "out": 10, "site": {"temp": 20}}),
    time_event(2000, {"in": 3, "out": None, "site": {"temp": 22}}),
    time_event(3000, {"in": 5, "out": 30, "site": {"temp": 24}}),
])


# --- single field vs field list ---

@suite.test("a single field gives a scalar, a list gives a dict")
def test_field_duality():
    assert_that(readings.sum("in") == 9, f"sum of in: {readings.sum('in')}")
    assert_that(readings.sum(["in"]) == {"in": 9}, "a one-element list still gives a dict")
    assert_that(readings.avg(["in", "out"]) == {"in": 3.0, "out": 20.0}, "avg per field")


@suite.test("aggregate with None reduces every top-level field")
def test_aggregate_all_fields():
    c = collection([time_event(1000, {"a": 1, "b": 2}), time_event(2000, {"a": 3, "b": 4})])
    assert_that(c.aggregate(functions.sum(), None) == {"a": 4, "b": 6}, "sum of every field")


@suite.test("nested paths aggregate under their dotted label")
def test_nested_field():
    assert_that(readings.max("site.temp") == 24, "max of a nested field")
    assert_that(readings.min(("site", "temp")) == 20, "path tuple")
    assert_that(readings.avg(["site.temp"]) == {"site.temp": 22.0}, "dotted label in the result")


# --- missing values ---

@suite.test("missing values are ignored by default and can be overridden")
def test_filter_override():
    assert_that(readings.count("out") == 2, "default count skips None")
    assert_that(readings.count("out", Filter.keep_missing) == 3, "keep_missing counts every event")
    assert_that(readings.sum("out", Filter.propagate_missing) is UNDEFINED, "propagated sum")
    assert_close(readings.avg("out", Filter.zero_missing), 40 / 3, "zeroed average")


@suite.test("empty collections sum to 0 and average to UNDEFINED")
def test_empty_collection():
    c = collection()
    assert_that(c.sum() == 0, "empty sum")
    assert_that(c.avg() is UNDEFINED, "empty avg")
    assert_that(c.max() is UNDEFINED and c.first() is UNDEFINED, "empty max and first")
    assert_that(c.count() == 0, "empty count")


@suite.test("first, last, median and stdev over a field")
def test_basic_reducers():
    c = ramp_collection([4, 2, 8, 6])
    assert_that(c.first() == 4 and c.last() == 6, "first and last follow collection order")
    assert_close(c.median(), 5.0, "median")
    assert_close(c.stdev(), 5 ** 0.5, "population stdev")


# --- percentile ---

@suite.test("percentile endpoints are the field min and max")
def test_percentile_endpoints():
    c = ramp_collection([7, 3, 9, 1])
    assert_that(c.percentile(0) == 1, "0th percentile")
    assert_that(c.percentile(100) == 9, "100th percentile")
    assert_close(c.percentile(50), 5.0, "50th percentile interpolates")
    assert_that(c.percentile(50, interp=InterpolationType.LOWER) == 3, "lower interpolation")


# --- quantile ---

@suite.test("quantile(4) gives the quartiles")
def test_quartiles():
    c = ramp_collection([5, 3, 1, 4, 2])
    assert_that(c.quantile(4) == [2, 3, 4], f"quartiles: {c.quantile(4)}")
    assert_that(c.quantile(1) == [], "one part has no split points")


@suite.test("quantile honours every interpolation mode")
def test_quantile_modes():
    c = ramp_collection([10, 20, 30, 40, 50])
    linear = c.quantile(3)
    assert_close(linear[0], 70 / 3, "first linear tertile")
    assert_close(linear[1], 110 / 3, "second linear tertile")
    expected = {
        InterpolationType.LOWER: [20, 30],
        InterpolationType.HIGHER: [30, 40],
        InterpolationType.NEAREST: [20, 40],
        InterpolationType.MIDPOINT: [25, 35],
    }
    for interp, values in expected.items():
        result = c.quantile(3, interp=interp)
        assert_that(result == values, f"{interp.name}: expected {values}, got {result}")


@suite.test("quantile sorts by the requested column")
def test_quantile_column():
    c = ramp_collection([30, 10, 20], field="x")
    assert_that(c.quantile(2, "x") == [20], f"median split: {c.quantile(2, 'x')}")


@suite.test("quantile skips events missing the column")
def test_quantile_missing_values():
    c = ramp_collection([1, 2, None, 4])
    result = c.quantile(4)
    assert_that(len(result) == 3, f"three split points, got {result}")
    for got, want in zip(result, [1.5, 2, 3.0]):
        assert_close(got, want, "quartile over the valid values")
    gaps = ramp_collection([float('nan'), None])
    assert_that(gaps.quantile(2) == [], "no valid values gives no split points")


@suite.test("quantile rejects n outside 1..size and a bad mode")
def test_quantile_errors():
    c = ramp_collection([1, 2, 3])
    suite.assert_raises(ValueError, lambda: c.quantile(4), "n greater than size")
    suite.assert_raises(ValueError, lambda: c.quantile(0), "n of zero")
    suite.assert_raises(TypeError, lambda: c.quantile(2, interp="linear"), "string mode")


if __name__ == "__main__":
    suite.run(title="keyseries collection aggregation test suite")
