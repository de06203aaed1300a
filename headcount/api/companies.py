"""Company endpoints: enterprise administration.

Provides API endpoints for:
- Listing and searching companies (reviewers)
- Reading one company (reviewers, or the company's own account)
- Creating and updating companies (super admins, audited)

Companies are never deleted; set ``is_active`` to false instead.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from headcount.database import get_db
from headcount.dependencies import get_company_service, get_principal
from headcount.domain.authorization import Principal
from headcount.errors import HeadcountError
from headcount.logging_config import get_logger
from headcount.schemas.company import Company, CompanyCreate, CompanyPage, CompanyUpdate

logger = get_logger(__name__)
router = APIRouter()


@router.get("/", response_model=CompanyPage)
def list_companies(
    page: int = Query(1, ge=1),
    page_size: int = Query(15, ge=1, le=200),
    search: str = "",
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CompanyPage:
    """Page of companies, newest first, optionally matching name or phone.

    Args:
        page: 1-based page number.
        page_size: Items per page.
        search: Substring of the company name or contact phone.
    """
    logger.info("companies_list_requested", page=page, search=search or None)
    result = get_company_service(db).list(
        principal, page=page, page_size=page_size, search=search
    )
    logger.info("companies_list_completed", count=len(result.items), total=result.total)
    return result


@router.get("/{company_id}", response_model=Company)
def get_company(
    company_id: int,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Company:
    return get_company_service(db).get(principal, company_id)


@router.post("/", response_model=Company, status_code=201)
def create_company(
    payload: CompanyCreate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Company:
    logger.info("company_create_requested", name=payload.name)

    try:
        company = get_company_service(db).create(principal, payload)
        logger.info("company_created", company_id=company.id)
        return company

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("company_create_failed", name=payload.name, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to create company: {str(e)}")


@router.put("/{company_id}", response_model=Company)
def update_company(
    company_id: int,
    payload: CompanyUpdate,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> Company:
    logger.info("company_update_requested", company_id=company_id)

    try:
        company = get_company_service(db).update(principal, company_id, payload)
        logger.info("company_updated", company_id=company_id)
        return company

    except (HTTPException, HeadcountError):
        raise
    except Exception as e:
        logger.error("company_update_failed", company_id=company_id, error=str(e))
        raise HTTPException(status_code=500, detail=f"Failed to update company: {str(e)}")
