"""
VM pricing service.

WHAT: Monthly price of virtual machines from the unit price table, the
markup based quote, and negotiation rounds over a proposal total.

WHY: The VM calculator prices each resource of a VM separately (cores,
RAM, storage, licence, extras). Quotes additionally gross the cost up for
commission and revenue tax before contract and director discounts.

HOW: Pure functions over PricingConfig and CommissionTables. Callers load the
stored documents and pass them in.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from pricing_api.core.exceptions import PricingValidationError
from pricing_api.schemas.commission import CommissionTables
from pricing_api.schemas.vm import (
    NegotiationRound,
    NegotiationStatus,
    PricingConfig,
    VMConfig,
    VMQuoteRequest,
    VMQuoteResult,
)
from pricing_api.services.commissions import partner_rates, resolve_seller_rate
from pricing_api.services.discounts import validate_director_percentage


logger = logging.getLogger(__name__)


def calculate_vm_price(vm: VMConfig, config: PricingConfig) -> float:
    """
    Monthly price of a single VM.

    Example:
        >>> calculate_vm_price(VMConfig(name="app", vcpu=2, ram=4, storage_size=0), PricingConfig())
        240.0
    """
    vcpu_cost = vm.vcpu * config.vcpu_per_core
    ram_cost = vm.ram * config.ram_per_gb
    storage_cost = vm.storage_size * config.storage_per_gb.get(vm.storage_type, 0)
    network_cost = config.network_per_gbps
    os_cost = config.os_license.get(vm.os, 0)
    backup_cost = vm.backup_size * config.backup_per_gb
    ip_cost = config.additional_ip if vm.additional_ip else 0
    snapshot_cost = config.additional_snapshot if vm.additional_snapshot else 0
    vpn_cost = config.vpn_site_to_site if vm.vpn_site_to_site else 0

    return (
        vcpu_cost
        + ram_cost
        + storage_cost
        + network_cost
        + os_cost
        + backup_cost
        + ip_cost
        + snapshot_cost
        + vpn_cost
    )


def calculate_vm_total(vms: List[VMConfig], config: PricingConfig) -> float:
    """Monthly total of a list of VMs, each multiplied by its quantity."""
    return sum(calculate_vm_price(vm, config) * vm.quantity for vm in vms)


def revenue_tax_rate(config: PricingConfig) -> float:
    """PIS/COFINS fraction of the selected tax regime (0 for unknown regimes)."""
    rates = config.taxes.get(config.selected_tax_regime)
    if rates is None:
        return 0
    return rates.pis_cofins / 100


def contract_discount_percentage(config: PricingConfig, months: int) -> float:
    return config.contract_discounts.get(str(months), 0)


def quote_vm(
    request: VMQuoteRequest,
    config: PricingConfig,
    tables: CommissionTables,
) -> VMQuoteResult:
    """
    Build a markup based quote for one VM configuration.

    price_before = C * (1 + markup) / (1 - commission - revenue_tax), or 0 when
    the denominator is not positive. Contract and director discounts are then
    applied in sequence; partner commissions are taken out of the discounted
    price to give the final price.
    """
    director_pct = validate_director_percentage(request.director_discount_percentage)
    months = request.contract_period

    cost = calculate_vm_price(request.vm, config)
    markup = config.markup / 100
    denominator = 1 - config.commission / 100 - revenue_tax_rate(config)
    price_before = cost * (1 + markup) / denominator if denominator > 0 else 0

    contract_pct = contract_discount_percentage(config, months)
    contract_amount = price_before * contract_pct / 100
    after_contract = price_before - contract_amount

    director_amount = after_contract * director_pct / 100
    after_director = after_contract - director_amount

    has_partners = request.include_referral_partner or request.include_influencer_partner
    seller_rate = resolve_seller_rate(tables, months, has_partners)
    seller_commission = after_director * seller_rate / 100

    indicator_rate, influencer_rate = partner_rates(
        tables,
        after_director,
        months,
        request.include_referral_partner,
        request.include_influencer_partner,
    )
    referral_commission = after_director * indicator_rate / 100
    influencer_commission = after_director * influencer_rate / 100

    final_price = after_director - referral_commission - influencer_commission
    total_commissions = seller_commission + referral_commission + influencer_commission
    net_profit = final_price - cost - total_commissions
    net_margin = net_profit / final_price * 100 if final_price > 0 else 0

    quantity = request.vm.quantity
    return VMQuoteResult(
        base_cost=cost,
        markup_amount=cost * markup,
        price_before_discounts=price_before,
        contract_discount_percentage=contract_pct,
        contract_discount_amount=contract_amount,
        director_discount_percentage=director_pct,
        director_discount_amount=director_amount,
        price_after_director_discount=after_director,
        referral_partner_commission=referral_commission,
        influencer_partner_commission=influencer_commission,
        final_price=max(0, final_price),
        seller_commission_rate=seller_rate,
        seller_commission=seller_commission,
        total_commissions=total_commissions,
        net_profit=net_profit,
        net_margin=net_margin,
        setup=config.setup_fee * quantity,
        monthly=max(0, final_price) * quantity,
    )


def add_negotiation_round(
    rounds: List[NegotiationRound],
    current_total: float,
    discount: float,
    description: str = "",
    vms: Optional[List[VMConfig]] = None,
) -> NegotiationRound:
    """
    Create the next negotiation round over the current proposal total.

    The new round becomes the active one; earlier active rounds are left
    untouched so their history stays visible.
    """
    if discount < 0 or discount > 100:
        raise PricingValidationError(
            message="Negotiation discount must be between 0 and 100",
            discount=discount,
        )
    new_round = NegotiationRound(
        round_number=len(rounds) + 1,
        date=datetime.now(timezone.utc),
        description=description,
        discount=discount,
        vms=vms or [],
        original_price=current_total,
        total_price=current_total * (1 - discount / 100),
        status=NegotiationStatus.ACTIVE,
    )
    logger.info(
        f"Negotiation round {new_round.round_number} created: "
        f"{current_total:.2f} -> {new_round.total_price:.2f} ({discount}%)"
    )
    return new_round


def validate_vm_proposal(client_name: str, proposal_name: str, vms: List[VMConfig]) -> None:
    """
    Check the fields required before a VM proposal is saved.

    Raises:
        PricingValidationError: Listing every missing field
    """
    errors = []
    if not client_name or not client_name.strip():
        errors.append("client name is required")
    if not proposal_name or not proposal_name.strip():
        errors.append("proposal name is required")
    if not vms:
        errors.append("at least one VM is required")
    for index, vm in enumerate(vms):
        if not vm.name.strip():
            errors.append(f"VM {index + 1} needs a name")

    if errors:
        raise PricingValidationError(message="Invalid VM proposal", errors=errors)
