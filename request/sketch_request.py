import logging
from typing import Any, Optional

from errors.errors import InvalidArgumentError
from sketch.buckets import DoubleHistogramBuckets, StringHistogramBuckets
from sketch.data_range_sketch import DataRangeSketch
from sketch.histogram_sketch import HistogramSketch
from sketch.quantile_sketch import QuantileSketch
from sketch.sketch import Sketch
from sketch.summary_sketch import SummarySketch
from table.converter import ColumnNameAndConverter, SortedStringConverter
from table.record_order import ColumnSortOrientation, RecordOrder
from table.schema import Schema

logger = logging.getLogger(__name__)

KINDS = ("histogram", "quantile", "range", "summary", "private_histogram")


class SketchRequest:
    """
    Serialized sketch arguments, as shipped by the transport layer:
        {"sketch": "histogram", "column": "x", "min": 0, "max": 10, "buckets": 5}
        {"sketch": "histogram", "column": "s", "boundaries": ["a", "m"]}
        {"sketch": "quantile", "order": [{"column": "x", "ascending": true}], "resolution": 100}
        {"sketch": "range", "column": "x"}
        {"sketch": "range", "column": "s", "converter": ["a", "m", "t"]}
        {"sketch": "summary"}
        {"sketch": "private_histogram", "column": "x", "buckets": 8, "min": 0, "max": 64}
    Column kinds are resolved against the schema of the target dataset.
    """
    def __init__(self, args: dict[str, Any]) -> None:
        self.args = args
        self.kind = args.get("sketch")
        if self.kind not in KINDS:
            raise InvalidArgumentError(f"Unknown sketch '{self.kind}', expected one of {KINDS}")
        self.name = args.get("name", self.kind)

    @classmethod
    def from_dict(cls, args: dict[str, Any]) -> "SketchRequest":
        if not isinstance(args, dict):
            raise InvalidArgumentError(f"Malformed sketch request {args!r}")
        return cls(args)

    @property
    def is_private(self) -> bool:
        return self.kind == "private_histogram"

    def _require(self, key: str) -> Any:
        if key not in self.args:
            raise InvalidArgumentError(f"'{self.kind}' request needs '{key}'")
        return self.args[key]

    def _optional_float(self, key: str) -> Optional[float]:
        return None if self.args.get(key) is None else float(self.args[key])

    def build(self, schema: Schema) -> Sketch:
        match self.kind:
            case "histogram":
                return self._histogram(schema)
            case "quantile":
                return self._quantile(schema)
            case "range":
                column = self._column(schema)
                return DataRangeSketch(column.column_name, column.converter)
            case "summary":
                return SummarySketch()
            case _:
                raise InvalidArgumentError(f"'{self.kind}' is not a plain sketch")

    def _column(self, schema: Schema) -> ColumnNameAndConverter:
        column = schema.get_description(self._require("column"))
        boundaries = self.args.get("converter")
        return ColumnNameAndConverter(column.name, None if boundaries is None else SortedStringConverter(boundaries))

    def _histogram(self, schema: Schema) -> HistogramSketch:
        column = schema.get_description(self._require("column"))
        name = self._column(schema)
        rate = float(self.args.get("rate", 1.0))
        seed = int(self.args.get("seed", 0))
        if "boundaries" in self.args:
            buckets = StringHistogramBuckets(self.args["boundaries"], self.args.get("max"))
        else:
            if not column.kind.is_numeric() and name.converter is None:
                raise InvalidArgumentError(f"Numeric histogram of non-numeric column {column}")
            buckets = DoubleHistogramBuckets(float(self._require("min")), float(self._require("max")),
                                             int(self._require("buckets")))
        return HistogramSketch(buckets, name.column_name, rate, seed, name.converter)

    def _quantile(self, schema: Schema) -> QuantileSketch:
        orientations = []
        for entry in self._require("order"):
            if isinstance(entry, str):
                entry = {"column": entry}
            orientations.append(ColumnSortOrientation(
                schema.get_description(entry["column"]), bool(entry.get("ascending", True))))
        seed = self.args.get("seed")
        return QuantileSketch(RecordOrder(orientations), int(self._require("resolution")),
                              seed=None if seed is None else int(seed))

    def private_args(self, schema: Schema) -> dict[str, Any]:
        seed = self.args.get("seed")
        return {
            "column": schema.get_description(self._require("column")),
            "bucket_count": int(self._require("buckets")),
            "min_value": self._optional_float("min"),
            "max_value": self._optional_float("max"),
            "seed": None if seed is None else int(seed),
        }

    def __repr__(self) -> str:
        return f"SketchRequest({self.args})"
