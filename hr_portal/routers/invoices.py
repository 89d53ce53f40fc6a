from typing import Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from hr_portal.core.exceptions import ConflictError
from hr_portal.core.schemas import ApiResponse, Pagination
from hr_portal.database import get_db
from hr_portal.models.invoice import Invoice
from hr_portal.models.user import User
from hr_portal.routers.auth_deps import require_hr
from hr_portal.schemas.invoice import InvoiceCreate, InvoiceResponse, InvoiceUpdate
from hr_portal.services.audit import AuditService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])


def _get_invoice_or_404(db: Session, invoice_id: int) -> Invoice:
    invoice = db.get(Invoice, invoice_id)
    if not invoice:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice


@router.post("", status_code=status.HTTP_201_CREATED)
def create_invoice(
    payload: InvoiceCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    if db.query(Invoice).filter(Invoice.invoice_number == payload.invoice_number).first():
        raise ConflictError("Invoice number already exists")
    if payload.due_date < payload.invoice_date:
        raise HTTPException(status_code=400, detail="Due date cannot be before invoice date")

    subtotal = round(sum(item.quantity * item.amount for item in payload.items), 2)
    invoice = Invoice(
        invoice_number=payload.invoice_number,
        client_name=payload.client_name,
        client_email=payload.client_email,
        invoice_date=payload.invoice_date,
        due_date=payload.due_date,
        items=[item.model_dump() for item in payload.items],
        currency=payload.currency.upper(),
        subtotal=subtotal,
        total=subtotal,
        notes=payload.notes,
        created_by=str(current_user.id) if current_user.id is not None else "admin",
    )
    db.add(invoice)
    db.flush()

    AuditService.log(
        db,
        action="create_invoice",
        entity_type="invoice",
        entity_id=invoice.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"invoice_number": invoice.invoice_number, "total": invoice.total},
    )
    db.commit()
    db.refresh(invoice)
    return ApiResponse.ok(data=InvoiceResponse.model_validate(invoice), message="Invoice created successfully")


@router.get("")
def list_invoices(
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    query = db.query(Invoice)
    if status and status != "all":
        query = query.filter(Invoice.status == status)

    total = query.count()
    invoices = (
        query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return ApiResponse.ok(
        data=[InvoiceResponse.model_validate(i) for i in invoices],
        pagination=Pagination.build(page, limit, len(invoices), total),
    )


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    return ApiResponse.ok(data=InvoiceResponse.model_validate(_get_invoice_or_404(db, invoice_id)))


@router.put("/{invoice_id}")
def update_invoice(
    invoice_id: int,
    payload: InvoiceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    invoice = _get_invoice_or_404(db, invoice_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "due_date" in changes and changes["due_date"] < invoice.invoice_date:
        raise HTTPException(status_code=400, detail="Due date cannot be before invoice date")
    before = {"status": invoice.status}
    for field, value in changes.items():
        setattr(invoice, field, value)

    AuditService.log(
        db,
        action="update_invoice",
        entity_type="invoice",
        entity_id=invoice.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"fields": list(changes)},
        before_state=before,
        after_state={"status": invoice.status},
    )
    db.commit()
    db.refresh(invoice)
    return ApiResponse.ok(data=InvoiceResponse.model_validate(invoice), message="Invoice updated successfully")


@router.delete("/{invoice_id}")
def delete_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_hr()),
):
    invoice = _get_invoice_or_404(db, invoice_id)
    AuditService.log(
        db,
        action="delete_invoice",
        entity_type="invoice",
        entity_id=invoice.id,
        user_id=current_user.id,
        user_role=current_user.role,
        details={"invoice_number": invoice.invoice_number},
    )
    db.delete(invoice)
    db.commit()
    return ApiResponse.ok(message="Invoice deleted successfully")
