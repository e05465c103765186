import datetime as dt
import re
from pathlib import Path
import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from apu_estimator.core.config import settings
from apu_estimator.schemas.project import Project
from apu_estimator.services.costing.engine import aggregate, apu_breakdown
from apu_estimator.services.store import dump_projects

_WS_RE = re.compile(r"\s+")

def project_export_filename(project: Project) -> str:
    return f"{_WS_RE.sub('_', project.name)}_budget.json"

def backup_filename(today: dt.date | None = None) -> str:
    today = today or dt.date.today()
    return f"projects_backup_{today.isoformat()}.json"

def dump_project(project: Project) -> str:
    return project.model_dump_json(by_alias=True, exclude_none=True, indent=2)

def dump_backup(projects: list[Project]) -> str:
    return dump_projects(projects, indent=2)

def budget_frames(project: Project) -> tuple[pd.DataFrame, pd.DataFrame]:
    rows = []
    res_rows = []
    for apu in project.apus:
        b = apu_breakdown(apu)
        rows.append({
            "code": apu.code,
            "category": apu.category,
            "description": apu.description,
            "unit": apu.unit,
            "quantity": apu.quantity,
            "direct_cost": b.direct_cost,
            "indirects": b.indirects,
            "profit": b.profit,
            "unit_price": b.unit_price,
            "total": b.total,
        })
        for r in apu.resources:
            res_rows.append({
                "apu_code": apu.code,
                "type": r.type.value,
                "name": r.name,
                "unit": r.unit,
                "price": r.price,
                "quantity": r.quantity,
                "amount": r.price * r.quantity,
            })
    budget = pd.DataFrame(rows, columns=["code", "category", "description", "unit", "quantity",
                                         "direct_cost", "indirects", "profit", "unit_price", "total"])
    resources = pd.DataFrame(res_rows, columns=["apu_code", "type", "name", "unit", "price", "quantity", "amount"])
    return budget, resources

def export_budget_xlsx(project: Project, out_path: Path):
    budget, resources = budget_frames(project)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="xlsxwriter") as w:
        budget.to_excel(w, index=False, sheet_name="budget")
        resources.to_excel(w, index=False, sheet_name="resources")
    return out_path

def export_budget_pdf(project: Project, out_path: Path):
    stats = aggregate(project.apus)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4
    y = height - 20*mm
    c.setFont("Helvetica-Bold", 14)
    c.drawString(20*mm, y, f"Budget: {project.name}")
    y -= 10*mm
    c.setFont("Helvetica", 11)
    lines = [
        f"Client: {project.client}" if project.client else None,
        f"Location: {project.location}" if project.location else None,
        f"Items: {len(project.apus)}",
        f"Total price: {stats.total_price:.2f}",
        f"Direct cost (raw resources): {stats.total_direct_cost:.2f}",
        f"  Material: {stats.material_cost:.2f}",
        f"  Labor: {stats.labor_cost:.2f}",
        f"  Equipment: {stats.equipment_cost:.2f}",
        f"  Transport: {stats.transport_cost:.2f}",
    ]
    for ln in lines:
        if ln is None:
            continue
        c.drawString(20*mm, y, ln)
        y -= 7*mm

    y -= 5*mm
    c.setFont("Helvetica-Bold", 10)
    c.drawString(20*mm, y, "Code")
    c.drawString(45*mm, y, "Description")
    c.drawString(130*mm, y, "Qty")
    c.drawString(160*mm, y, "Total")
    c.setFont("Helvetica", 10)
    for apu in project.apus:
        y -= 6*mm
        if y < 20*mm:
            c.showPage()
            c.setFont("Helvetica", 10)
            y = height - 20*mm
        b = apu_breakdown(apu)
        c.drawString(20*mm, y, apu.code[:14])
        c.drawString(45*mm, y, apu.description[:48])
        c.drawString(130*mm, y, f"{apu.quantity:g} {apu.unit}"[:16])
        c.drawString(160*mm, y, f"{b.total:.2f}")
    c.showPage()
    c.save()
    return out_path

def default_export_path(prefix: str, ext: str) -> Path:
    ts = dt.datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(settings.EXPORT_DIR) / f"{prefix}_{ts}.{ext}"
