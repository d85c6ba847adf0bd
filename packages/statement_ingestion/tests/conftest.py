import io

import pytest
from openpyxl import Workbook


@pytest.fixture
def make_xlsx():
    """Build an in-memory .xlsx whose first sheet holds the given rows."""

    def _make(rows):
        workbook = Workbook()
        sheet = workbook.active
        for row in rows:
            sheet.append(row)
        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()

    return _make


@pytest.fixture
def app_export_csv():
    return (
        b"Date,Description,Amount,Type,Category,Method\n"
        b"2024-03-01,Salary Credit,50000,Income,Salary,Online\n"
        b"2024-03-10,Petrol Pump,2000,Expense,Transportation,Cash\n"
    )
