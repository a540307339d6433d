"""
Calculator API endpoints.

WHAT: Authenticated POST endpoints that price VMs, PABX/SIP, double
fiber/radio links, DREs and paybacks.

WHY: The arithmetic lives in pure service functions; these routes load the
stored price and commission tables, run the services and return the
results. Nothing here is persisted; proposals are saved through the
proposals API.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pricing_api.core.deps import get_current_user
from pricing_api.core.exceptions import PlanNotFoundError
from pricing_api.db.session import get_db
from pricing_api.models.user import User
from pricing_api.schemas.dre import DRERequest, DREResponse, DRETable
from pricing_api.schemas.fiber_radio import (
    FiberRadioQuoteRequest,
    FiberRadioQuote,
    FiberRadioDRERequest,
    FiberRadioDREResponse,
)
from pricing_api.schemas.pabx import (
    PabxCalculationRequest,
    PabxCalculationResponse,
    PabxDRERequest,
    PabxProposalTotalsRequest,
    PabxProposalTotals,
    SipRequest,
    SipResult,
)
from pricing_api.schemas.payback import PaybackRequest, PaybackValidation
from pricing_api.schemas.vm import (
    VMPriceRequest,
    VMPriceResponse,
    VMPriceLine,
    VMQuoteRequest,
    VMQuoteResult,
)
from pricing_api.services.commissions import (
    channel_director_rate,
    partner_rates,
    resolve_seller_rate,
)
from pricing_api.services.dre import (
    build_dre_table,
    build_pabx_result_summary,
    calculate_dre,
    calculate_multiple_period_dre,
    calculate_payback_from_dre,
    format_dre_for_display,
    validate_dre_values,
)
from pricing_api.services.fiber_radio import calculate_dre_all_periods, quote_link
from pricing_api.services.pabx_sip import (
    calculate_pabx,
    calculate_proposal_totals,
    calculate_sip_request,
)
from pricing_api.services.payback import (
    calculate_pabx_payback,
    check_payback,
    evaluate_payback,
)
from pricing_api.services.pricing_settings import PricingSettingsService
from pricing_api.services.vm_pricing import calculate_vm_price, quote_vm


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculators", tags=["calculators"])


def _sip_or_404(request: Optional[SipRequest]) -> Optional[SipResult]:
    if request is None:
        return None
    result = calculate_sip_request(request)
    if result is None:
        raise PlanNotFoundError(
            message=f"SIP plan not found: {request.plan}",
            resource_type="SipPlan",
            plan=request.plan,
        )
    return result


# ============================================================================
# VM
# ============================================================================


@router.post(
    "/vm",
    response_model=VMPriceResponse,
    summary="Price virtual machines",
    description="Monthly price of each VM configuration with the stored VM pricing config",
)
async def price_vms(
    request: VMPriceRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> VMPriceResponse:
    config = await PricingSettingsService(db).get_vm_pricing_config()

    lines = []
    for vm in request.vms:
        unit_price = calculate_vm_price(vm, config)
        lines.append(
            VMPriceLine(
                name=vm.name,
                quantity=vm.quantity,
                unit_price=unit_price,
                total_price=unit_price * vm.quantity,
            )
        )
    return VMPriceResponse(lines=lines, total_monthly=sum(line.total_price for line in lines))


@router.post(
    "/vm/quote",
    response_model=VMQuoteResult,
    summary="Quote a virtual machine",
    description="Markup based quote with contract, director and partner deductions",
)
async def quote_vm_endpoint(
    request: VMQuoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> VMQuoteResult:
    service = PricingSettingsService(db)
    config = await service.get_vm_pricing_config()
    tables = await service.get_commission_tables()
    return quote_vm(request, config, tables)


# ============================================================================
# PABX / SIP
# ============================================================================


@router.post(
    "/pabx",
    response_model=PabxCalculationResponse,
    summary="Price PABX and SIP trunk",
    description="PABX and/or SIP prices with result summary, DRE table and payback",
)
async def calculate_pabx_sip(
    request: PabxCalculationRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PabxCalculationResponse:
    """
    Price a PABX/SIP proposal.

    HOW:
    1. PABX with the stored standard prices, SIP by plan name
    2. Commission rates for the contract duration and monthly revenue
    3. Result summary and DRE table over the combined monthly revenue
    4. PABX payback with the total setup as installation and no equipment cost
    """
    service = PricingSettingsService(db)
    duration = request.contract_duration

    pabx = None
    if request.pabx is not None:
        prices = await service.get_pabx_prices()
        pabx = calculate_pabx(request.pabx, prices)
    sip = _sip_or_404(request.sip)

    monthly = (pabx.total_monthly if pabx else 0) + (sip.monthly if sip else 0)
    setup = (pabx.setup if pabx else 0) + (sip.setup if sip else 0)

    tables = await service.get_commission_tables()
    has_partners = request.include_referral_partner or request.include_influencer_partner
    seller_rate = resolve_seller_rate(tables, duration, has_partners)
    director_rate = channel_director_rate(tables, duration)
    indicator_rate, influencer_rate = partner_rates(
        tables,
        monthly,
        duration,
        request.include_referral_partner,
        request.include_influencer_partner,
    )

    summary = build_pabx_result_summary(
        monthly,
        seller_rate,
        director_rate,
        indicator_rate,
        influencer_rate,
        installation_fee=setup,
    )
    dre = build_dre_table(
        pabx,
        sip,
        duration,
        seller_rate,
        director_rate,
        indicator_rate + influencer_rate,
    )

    actual = calculate_pabx_payback(
        setup,
        0,
        monthly,
        duration,
        director_pct=request.director_discount_percentage,
        seller_rate=seller_rate,
    )
    payback = check_payback(actual, duration)

    return PabxCalculationResponse(pabx=pabx, sip=sip, summary=summary, dre=dre, payback=payback)


@router.post(
    "/sip",
    response_model=SipResult,
    summary="Price a SIP trunk",
)
async def calculate_sip_endpoint(
    request: SipRequest,
    current_user: User = Depends(get_current_user),
) -> SipResult:
    """
    Raises:
        PlanNotFoundError (404): If the SIP plan doesn't exist
    """
    return _sip_or_404(request)


@router.post(
    "/pabx/dre",
    response_model=DRETable,
    summary="PABX/SIP income statement",
)
async def calculate_pabx_dre(
    request: PabxDRERequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DRETable:
    tables = await PricingSettingsService(db).get_commission_tables()
    duration = request.contract_duration
    monthly = (request.pabx.total_monthly if request.pabx else 0) + (
        request.sip.monthly if request.sip else 0
    )
    has_partners = request.include_referral_partner or request.include_influencer_partner
    indicator_rate, influencer_rate = partner_rates(
        tables,
        monthly,
        duration,
        request.include_referral_partner,
        request.include_influencer_partner,
    )
    return build_dre_table(
        request.pabx,
        request.sip,
        duration,
        resolve_seller_rate(tables, duration, has_partners),
        channel_director_rate(tables, duration),
        indicator_rate + influencer_rate,
        revenue_tax_rate=request.revenue_tax_rate,
        profit_tax_rate=request.profit_tax_rate,
    )


@router.post(
    "/pabx/proposal-totals",
    response_model=PabxProposalTotals,
    summary="PABX/SIP proposal totals",
    description="Totals of the proposal items after discounts and partner commissions",
)
async def calculate_pabx_proposal_totals(
    request: PabxProposalTotalsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> PabxProposalTotals:
    tables = await PricingSettingsService(db).get_commission_tables()
    return calculate_proposal_totals(
        request.client_name,
        request.items,
        tables,
        contract_duration=request.contract_duration,
        salesperson=request.apply_salesperson_discount,
        director_pct=request.director_discount_percentage,
        include_indicator=request.include_referral_partner,
        include_influencer=request.include_influencer_partner,
    )


# ============================================================================
# Double fiber/radio
# ============================================================================


@router.post(
    "/fiber-radio",
    response_model=FiberRadioQuote,
    summary="Quote a double fiber/radio link",
)
async def quote_fiber_radio(
    request: FiberRadioQuoteRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FiberRadioQuote:
    """
    Raises:
        PlanNotFoundError (404): If no plan has the requested speed
    """
    plans = await PricingSettingsService(db).get_fiber_radio_plans()
    return quote_link(plans, request)


@router.post(
    "/fiber-radio/dre",
    response_model=FiberRadioDREResponse,
    summary="Double fiber/radio DRE",
    description="Quote plus income statement for each period (12 to 60 months by default)",
)
async def fiber_radio_dre(
    request: FiberRadioDRERequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> FiberRadioDREResponse:
    service = PricingSettingsService(db)
    plans = await service.get_fiber_radio_plans()
    tables = await service.get_commission_tables()

    quote = quote_link(plans, request)
    periods = calculate_dre_all_periods(plans, request, tables, request.periods, request.tax_rates)
    return FiberRadioDREResponse(quote=quote, periods=periods)


# ============================================================================
# Generic DRE and payback
# ============================================================================


@router.post(
    "/dre",
    response_model=DREResponse,
    summary="Generic DRE",
)
async def generic_dre(
    request: DRERequest,
    current_user: User = Depends(get_current_user),
) -> DREResponse:
    """
    First-month DRE for each period within the contract, its display
    version, the simple payback and the input consistency checks.
    """
    inputs = request
    errors = validate_dre_values(inputs)
    if errors:
        logger.info(f"DRE inputs rejected: {errors}")

    return DREResponse(
        periods=calculate_multiple_period_dre(inputs, request.periods),
        formatted=format_dre_for_display(calculate_dre(inputs)),
        payback_months=calculate_payback_from_dre(
            inputs.installation_revenue,
            inputs.service_cost,
            inputs.monthly_revenue,
        ),
        is_valid=not errors,
        errors=errors,
    )


@router.post(
    "/payback",
    response_model=PaybackValidation,
    summary="Payback validation",
    description="Payback month of a link, PABX or generic service checked against the term limit",
)
async def payback(
    request: PaybackRequest,
    current_user: User = Depends(get_current_user),
) -> PaybackValidation:
    return evaluate_payback(request)
