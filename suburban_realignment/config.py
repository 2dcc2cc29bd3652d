import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file if it exists
load_dotenv()

# Paths
PROJ_ROOT = Path(__file__).resolve().parents[1]
logger.info(f"PROJ_ROOT path is: {PROJ_ROOT}")

DATA_DIR = PROJ_ROOT / "data"
RAW_DATA_DIR = DATA_DIR / "raw"
INTERIM_DATA_DIR = DATA_DIR / "interim"
PROCESSED_DATA_DIR = DATA_DIR / "processed"
EXTERNAL_DATA_DIR = DATA_DIR / "external"

REPORTS_DIR = PROJ_ROOT / "reports"
FIGURES_DIR = REPORTS_DIR / "figures"
MAPS_DIR = FIGURES_DIR / "maps"

TABULAR_DATA_DIR = PROCESSED_DATA_DIR / "tabular"
WAREHOUSE_SQLITE = PROCESSED_DATA_DIR / "thesis.sqlite"

# ICPSR studies have to be fetched by hand (login required); these are the
# paths the unzipped archives land on.
ICPSR_TURNOUT_STUDY = 38506
ICPSR_URBANICITY_STUDY = 38606
ICPSR_CONNECTIVITY_STUDY = 38580

TURNOUT_SAV = RAW_DATA_DIR / "ICPSR_38506" / "DS0001" / "38506-0001-Data.sav"
URBANICITY_SAV = RAW_DATA_DIR / "ICPSR_38606" / "DS0001" / "38606-0001-Data.sav"
CONNECTIVITY_2010_SAV = RAW_DATA_DIR / "ICPSR_38580" / "DS0001" / "38580-0001-Data.sav"
CONNECTIVITY_2020_SAV = RAW_DATA_DIR / "ICPSR_38580" / "DS0003" / "38580-0003-Data.sav"

COUNTY_DATA_URL = os.getenv(
    "COUNTY_DATA_URL",
    "https://github.com/eliza11494-hub/Thesis/raw/main/CountyDataGood.xlsx",
)
COUNTY_DATA_XLSX = DATA_DIR / "CountyDataGood.xlsx"

ANES_URL = os.getenv(
    "ANES_URL",
    "https://electionstudies.org/wp-content/uploads/2022/09/anes_timeseries_cdf_csv_20220916.csv",
)
ANES_CSV = DATA_DIR / "anes_timeseries_cdf_csv_20220916.csv"

COUNTY_SHAPES_URL = os.getenv(
    "COUNTY_SHAPES_URL",
    "https://www2.census.gov/geo/tiger/GENZ2018/shp/cb_2018_us_county_20m.zip",
)
COUNTY_SHAPES_ZIP = EXTERNAL_DATA_DIR / "cb_2018_us_county_20m.zip"

DOWNLOAD_TIMEOUT = int(os.getenv("DOWNLOAD_TIMEOUT", "120"))

# If tqdm is installed, configure loguru with tqdm.write
# https://github.com/Delgan/loguru/issues/135
try:
    from tqdm import tqdm

    logger.remove(0)
    logger.add(lambda msg: tqdm.write(msg, end=""), colorize=True)
except ModuleNotFoundError:
    pass
