"""Reports: catalogue and Excel export."""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from sigep.database import get_db
from sigep import crud, schemas
from sigep.routers.common import RESPONSE_400, RESPONSE_404
from sigep.services import reports as report_service
from sigep.utils.http_headers import ascii_filename, build_content_disposition

router = APIRouter(prefix="/api/reports", tags=["reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("", response_model=List[schemas.ReportInfo])
async def list_reports():
    return [schemas.ReportInfo(**r) for r in report_service.list_reports()]


@router.get("/{report_id}/export", responses={**RESPONSE_400, **RESPONSE_404})
async def export_report(
    report_id: str,
    unit_id: int | None = Query(None),
    position_id: int | None = Query(None),
    person_id: int | None = Query(None),
    absence_type_id: int | None = Query(None),
    status_id: int | None = Query(None),
    situation: str | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    as_of: date | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Export one report as .xlsx. Unused filters are ignored by each report."""
    params = {
        "unit_id": unit_id,
        "position_id": position_id,
        "person_id": person_id,
        "absence_type_id": absence_type_id,
        "status_id": status_id,
        "situation": situation,
        "date_from": date_from,
        "date_to": date_to,
        "as_of": as_of,
    }
    try:
        title, headers, rows = await report_service.run_report(db, report_id, params)
    except report_service.ReportNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except report_service.MissingReportFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except crud.NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    buf = report_service.build_workbook(title, headers, rows)
    filename = f"{title}_{date.today().isoformat()}.xlsx"
    return StreamingResponse(
        buf,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": build_content_disposition(ascii_filename(filename), filename)},
    )
