"""Error taxonomy shared by the ETL and analytics layers."""


class WarehouseError(Exception):
    """Base class for all warehouse errors."""


class MissingDimensionValue(WarehouseError):
    """An enumerated dimension has no row with the requested name."""

    def __init__(self, table: str, name: str):
        self.table = table
        self.name = name
        super().__init__(f"Missing dimension value: {name!r} in {table}")


class DimensionConflict(WarehouseError):
    """Another writer created the authority row for the agency mid-insert and the policy forbids reuse."""

    def __init__(self, agency: str):
        self.agency = agency
        super().__init__(f"Authority for agency {agency!r} was created concurrently")


class UpstreamFetchFailure(WarehouseError):
    """The report source did not return a usable report collection."""


class TransactionFailure(WarehouseError):
    """A store-level write or constraint failure inside an ingestion transaction."""


class ReportParseError(WarehouseError):
    """A raw report document does not match the expected shape."""

    def __init__(self, report_id: str | None, message: str):
        self.report_id = report_id
        super().__init__(message)


class InvalidDateWindow(WarehouseError, ValueError):
    """startDate/endDate could not be parsed or are out of order."""
