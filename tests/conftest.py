from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from nycsales.config import CONFIG_ENV_VAR, AnalysisConfig  # noqa: E402
from nycsales.models import Borough  # noqa: E402

RAW_COLUMNS = [
    "BOROUGH",
    "NEIGHBORHOOD",
    "BUILDING CLASS CATEGORY",
    "TAX CLASS AT PRESENT",
    "BLOCK",
    "LOT",
    "EASE-MENT",
    "BUILDING CLASS AT PRESENT",
    "ADDRESS",
    "APARTMENT NUMBER",
    "ZIP CODE",
    "RESIDENTIAL UNITS",
    "COMMERCIAL UNITS",
    "TOTAL UNITS",
    "LAND SQUARE FEET",
    "GROSS SQUARE FEET",
    "YEAR BUILT",
    "TAX CLASS AT TIME OF SALE",
    "BUILDING CLASS AT TIME OF SALE",
    "SALE PRICE",
    "SALE DATE",
]

BOILERPLATE = [
    "Brooklyn Rolling Sales File.  All Sales From August 2018 - August 2019.",
    "Sales File as of 08/30/2019  Coop Sales Files as of 09/18/2019",
    "Neighborhood Name and Descriptive Data is as of 09/01/2019",
    "Building Class Category is based on Building Class at Time of Sale.",
]


def make_sale(
    borough=3,
    neighborhood="BAY RIDGE",
    building_class="A5",
    sale_price=500000,
    gross_square_feet=1500,
    address=None,
    **overrides,
):
    """One raw export row keyed by the export's own headers."""
    row = {
        "BOROUGH": borough,
        "NEIGHBORHOOD": neighborhood,
        "BUILDING CLASS CATEGORY": "01 ONE FAMILY DWELLINGS",
        "TAX CLASS AT PRESENT": "1",
        "BLOCK": 5900,
        "LOT": 12,
        "EASE-MENT": None,
        "BUILDING CLASS AT PRESENT": building_class,
        "ADDRESS": address or f"{gross_square_feet} {sale_price} MAIN STREET",
        "APARTMENT NUMBER": None,
        "ZIP CODE": 11209,
        "RESIDENTIAL UNITS": 1,
        "COMMERCIAL UNITS": 0,
        "TOTAL UNITS": 1,
        "LAND SQUARE FEET": 2000,
        "GROSS SQUARE FEET": gross_square_feet,
        "YEAR BUILT": 1925,
        "TAX CLASS AT TIME OF SALE": 1,
        "BUILDING CLASS AT TIME OF SALE": building_class,
        "SALE PRICE": sale_price,
        "SALE DATE": "2019-03-14",
    }
    row.update(overrides)
    return row


def neighborhood_sales(borough, neighborhood, n, slope, intercept=50000, start=1000):
    """``n`` A5 sales lying close to ``price = intercept + slope * area``."""
    rows = []
    for i in range(n):
        area = start + 100 * i
        noise = 20000 if i % 2 else -20000
        rows.append(
            make_sale(
                borough=borough,
                neighborhood=neighborhood,
                sale_price=intercept + slope * area + noise,
                gross_square_feet=area,
            )
        )
    return rows


def write_sales_file(path, rows):
    """Write rows as a rolling sales CSV with four lines of boilerplate."""
    path = Path(path)
    with open(path, "w", encoding="utf-8", newline="") as f:
        for line in BOILERPLATE:
            f.write(line + "\n")
        pd.DataFrame(rows, columns=RAW_COLUMNS).to_csv(f, index=False)
    return path


def write_dataset(directory, rows_by_borough):
    """Write one CSV per borough and return a config pointing at them."""
    directory = Path(directory)
    files = {}
    for borough in Borough:
        name = f"rollingsales_{borough.file_stem}.csv"
        write_sales_file(directory / name, rows_by_borough.get(borough, []))
        files[borough] = name

    config = AnalysisConfig()
    config.input.data_dir = str(directory)
    config.input.files = files
    config.cleaning.output_file = str(directory / "NYC_property_sales.csv")
    config.report.output_dir = str(directory / "figures")
    config.report.show_progress = False
    return config


def sample_rows():
    """Five boroughs of synthetic sales with known regression structure."""
    brooklyn = neighborhood_sales(3, "BAY RIDGE", 10, slope=500)
    brooklyn += [
        make_sale(borough=3, neighborhood="BAY RIDGE", building_class="A1"),
        make_sale(borough=3, neighborhood="DYKER HEIGHTS", sale_price=5000),
        make_sale(borough=3, neighborhood="DYKER HEIGHTS", gross_square_feet=100),
        make_sale(borough=3, neighborhood="DYKER HEIGHTS", gross_square_feet=None),
        make_sale(borough=3, neighborhood="BAY RIDGE", sale_price=" -  "),
    ]
    # exact duplicate of an existing sale
    brooklyn.append(dict(brooklyn[0]))

    astoria_prices = [
        600000, 300000, 650000, 250000, 700000,
        200000, 600000, 350000, 500000, 400000,
    ]
    queens = neighborhood_sales(4, "BAYSIDE", 11, slope=350)
    queens += [
        make_sale(
            borough=4,
            neighborhood="ASTORIA",
            sale_price=price,
            gross_square_feet=1000 + 100 * i,
        )
        for i, price in enumerate(astoria_prices)
    ]

    return {
        Borough.MANHATTAN: neighborhood_sales(1, "HARLEM-CENTRAL", 10, slope=400),
        Borough.BRONX: neighborhood_sales(2, "THROGS NECK", 12, slope=250)
        + neighborhood_sales(2, "PELHAM BAY", 4, slope=250),
        Borough.BROOKLYN: brooklyn,
        Borough.QUEENS: queens,
        Borough.STATEN_ISLAND: neighborhood_sales(5, "GREAT KILLS", 10, slope=200),
    }


QUALIFYING = {
    ("Manhattan", "Harlem-Central"),
    ("Bronx", "Throgs Neck"),
    ("Brooklyn", "Bay Ridge"),
    ("Queens", "Bayside"),
    ("Staten Island", "Great Kills"),
}


@pytest.fixture(autouse=True)
def no_config_env(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)


@pytest.fixture
def sample_config(tmp_path):
    return write_dataset(tmp_path, sample_rows())
