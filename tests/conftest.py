"""Pytest configuration and shared fixtures."""
import os

import pytest

# Keep a developer's .env or shell settings out of the test run
for _var in (
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
    "LOG_DIR",
    "LOG_ECHO",
    "NCPDP_DEFAULT_FILE_PATH",
    "NCPDP_STOP_ON_ERROR",
    "NCPDP_STRICT_VERSION",
    "EDI_PRODUCTION_MODE",
):
    os.environ.pop(_var, None)

from rxremit.config.settings import get_settings
from rxremit.services.ncpdp.parser import NcpdpD0Parser

APPROVED_TRANSACTION = (
    "STX*D0*\n"
    "AM01*1234567*PHARMACY001*20241014*143025*1*\n"
    "AM04*01*R*1*\n"
    "AM07*BCBSIL*60054*123456789*01*SMITH*JOHN*A*19850515*M*456 PATIENT AVE*CHICAGO*IL*60602*\n"
    "AM11*00123456789*1*1234567890*JONES*ROBERT*D*555-123-4567*\n"
    "AM13*20241014*12345*1*00002012345678*LIPITOR*20MG*TAB*30*EA*1*0*0*30*\n"
    "AM15*59762-0123-03*\n"
    "AM17*01*250.00*02*225.00*03*20.00*04*5.00*05*0.00*06*0.00*07*0.00*11*270.00*\n"
    "AN02*A*00*APPROVED*\n"
    "AN23*01*225.00*02*5.00*03*20.00*05*230.00*\n"
    "AN25*CLAIM APPROVED*AUTH123456*\n"
    "SE*12*1234567*\n"
)

REJECTED_TRANSACTION = (
    "STX*D0*\n"
    "AM01*7654321*PHARMACY002*20241015*091500*1*\n"
    "AM07*aetna*61234*987654321*01*DOE*JANE**19700101*F*1 MAIN ST*AUSTIN*TX*73301*\n"
    "AM13*20241015*67890*2*00093015001*METFORMIN*500MG*TAB*60*EA*0*3*0*30*\n"
    "AM17*01*40.00*03*2.50*11*42.50*\n"
    "AN02*R*70*PRODUCT NOT COVERED*\n"
    "SE*7*7654321*\n"
)

COMPOUND_TRANSACTION = (
    "STX*D0*\n"
    "AM01*1111111*PHARMACY003*20241016*100000*1*\n"
    "AM07*CIGNA*62000*555000111*01*BROWN*SAM*T*19900202*M*9 ELM ST*DENVER*CO*80014*\n"
    "AM13*20241016*24680*1*99999999999*CUSTOM CREAM*N/A*CRM*75*GM*0*0*0*15*\n"
    "AM14*01*00006020001234*50*ML*125.00*02*00008820004567*25*GM*85.00*\n"
    "AM17*01*210.00*03*15.00*11*225.00*\n"
    "AM21*03*PA123456789*\n"
    "SE*8*1111111*\n"
)

MINIMAL_TRANSACTION = "STX*D0*\nAM01*1234567*PHARMACY001*20241014*143025*1*\nSE*15*1234567*"


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Each test sees settings built from its own environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def parser():
    """Parser with version checking disabled."""
    return NcpdpD0Parser(strict_version=False)


@pytest.fixture
def approved_transaction_text():
    return APPROVED_TRANSACTION


@pytest.fixture
def rejected_transaction_text():
    return REJECTED_TRANSACTION


@pytest.fixture
def compound_transaction_text():
    return COMPOUND_TRANSACTION


@pytest.fixture
def minimal_transaction_text():
    return MINIMAL_TRANSACTION


@pytest.fixture
def approved_transaction(parser):
    return parser.parse(APPROVED_TRANSACTION)


@pytest.fixture
def rejected_transaction(parser):
    return parser.parse(REJECTED_TRANSACTION)


@pytest.fixture
def compound_transaction(parser):
    return parser.parse(COMPOUND_TRANSACTION)


@pytest.fixture
def claims_file(tmp_path):
    """A claims file holding two good transactions and one truncated AM01."""
    content = (
        "# NCPDP D.0 sample claims\n"
        "\n"
        + APPROVED_TRANSACTION
        + "\n"
        + REJECTED_TRANSACTION
        + "\n"
        "STX*D0*\n"
        "AM01*BAD*\n"
        "SE*3*BAD*\n"
    )
    path = tmp_path / "ncpdp_rx_claims.txt"
    path.write_text(content, encoding="utf-8")
    return path
