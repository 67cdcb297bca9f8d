"""Pytest configuration and shared fixtures."""

from typing import Any, Dict

import numpy as np
import pandas as pd
import pytest

from helpers import make_columninfo


@pytest.fixture
def columninfo_10() -> pd.DataFrame:
    """Target BAD plus nine feature columns, two of them varchar."""
    return make_columninfo(
        [
            ("BAD", "num"),
            ("LOAN", "num"),
            ("MORTDUE", "num"),
            ("VALUE", "num"),
            ("REASON", "varchar"),
            ("JOB", "varchar"),
            ("YOJ", "num"),
            ("DEROG", "num"),
            ("DELINQ", "num"),
            ("CLAGE", "num"),
        ]
    )


@pytest.fixture
def hmeq_frame() -> pd.DataFrame:
    """Small HMEQ-like table with missing values, imputed copies and a partition column."""
    rng = np.random.RandomState(7)
    n = 240
    debtinc = rng.normal(35.0, 8.0, n)
    loan = rng.randint(1000, 50000, n).astype(float)
    job = rng.choice(["Mgr", "Office", "Other", "Sales"], n).astype(object)
    reason = rng.choice(["DebtCon", "HomeImp"], n).astype(object)
    bad = ((debtinc + rng.normal(0.0, 5.0, n)) > 40.0).astype(int)

    debtinc[::9] = np.nan
    job[::11] = None

    return pd.DataFrame(
        {
            "BAD": bad,
            "LOAN": loan,
            "DEBTINC": debtinc,
            "REASON": reason,
            "JOB": job,
            "IMP_DEBTINC": np.where(np.isnan(debtinc), 35.0, debtinc),
            "IMP_JOB": np.where(pd.isna(job), "Other", job),
            "_PartInd_": (np.arange(n) % 3 == 0).astype(int),
        }
    )


@pytest.fixture
def hmeq_columninfo() -> pd.DataFrame:
    """Column metadata matching ``hmeq_frame``."""
    return make_columninfo(
        [
            ("BAD", "double"),
            ("LOAN", "double"),
            ("DEBTINC", "double"),
            ("REASON", "varchar"),
            ("JOB", "varchar"),
            ("IMP_DEBTINC", "double"),
            ("IMP_JOB", "varchar"),
            ("_PartInd_", "double"),
        ]
    )


@pytest.fixture
def base_config(tmp_path) -> Dict[str, Any]:
    """Minimal env config pointing outputs at a temp dir."""
    return {
        "cas_host": "cas.example.test",
        "cas_port": 5570,
        "cas_protocol": None,
        "cas_username": None,
        "cas_password": None,
        "caslib": "casuser",
        "source_table": "hmeq_part",
        "target": "BAD",
        "event": "1",
        "non_event": "0",
        "partition_column": "_PartInd_",
        "imputed_prefix": "IMP_",
        "cutoff": 0.5,
        "cutoff_tolerance": 1e-9,
        "model_caslib": "casuser",
        "promote_caslib": "Public",
        "output_dir": str(tmp_path / "outputs"),
        "artifact_bucket": None,
        "missing_sentinel": -999.0,
        "random_state": 42,
        "log_level": "INFO",
    }
