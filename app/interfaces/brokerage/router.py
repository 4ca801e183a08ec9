"""
FastAPI routers for the brokerage bounded context.

All routes delegate to use cases. No business logic here.
Input validation is handled by Pydantic schemas.
Error mapping is handled by centralized error handlers.

Routers:
    - orders_router: customer order placement, listing and cancellation
    - assets_router: customer balances
    - admin_router: order matching and balance deposits
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from app.application.brokerage.cancel_order import CancelOrderUseCase
from app.application.brokerage.create_order import CreateOrderUseCase
from app.application.brokerage.deposit_asset import DepositAssetUseCase
from app.application.brokerage.dtos import (
    BalanceResult,
    CancelOrderCommand,
    CreateOrderCommand,
    DepositAssetCommand,
    GetBalanceQuery,
    GetOrderQuery,
    ListBalancesQuery,
    ListOrdersQuery,
    MatchOrderCommand,
    OrderResult,
)
from app.application.brokerage.get_balance import GetBalanceUseCase
from app.application.brokerage.get_order import GetOrderUseCase
from app.application.brokerage.list_balances import ListBalancesUseCase
from app.application.brokerage.list_orders import ListOrdersUseCase
from app.application.brokerage.list_pending_orders import ListPendingOrdersUseCase
from app.application.brokerage.match_order import MatchOrderUseCase
from app.interfaces.brokerage.dependencies import (
    get_balance_use_case,
    get_cancel_order_use_case,
    get_create_order_use_case,
    get_deposit_asset_use_case,
    get_list_balances_use_case,
    get_list_orders_use_case,
    get_list_pending_orders_use_case,
    get_match_order_use_case,
    get_order_use_case,
)
from app.interfaces.brokerage.schemas import (
    BalanceResponse,
    CreateOrderRequest,
    DepositAssetRequest,
    ErrorResponse,
    MatchOrderRequest,
    OrderResponse,
)

CustomerId = Annotated[str, Query(min_length=1, description="Customer owning the resource")]

orders_router = APIRouter(prefix="/orders", tags=["orders"])
assets_router = APIRouter(prefix="/assets", tags=["assets"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


def _order_response(result: OrderResult) -> OrderResponse:
    return OrderResponse(
        order_id=result.order_id,
        customer_id=result.customer_id,
        asset_name=result.asset_name,
        side=result.side,
        size=result.size,
        price=result.price,
        total_value=result.total_value,
        status=result.status,
        created_at=result.created_at,
    )


def _balance_response(result: BalanceResult) -> BalanceResponse:
    return BalanceResponse(
        customer_id=result.customer_id,
        asset_name=result.asset_name,
        total=result.total,
        usable=result.usable,
        reserved=result.reserved,
    )


@orders_router.post(
    "",
    response_model=OrderResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Place an order",
    description="Reserve funds and create a PENDING BUY or SELL order.",
)
def create_order(
    request: CreateOrderRequest,
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case),
) -> OrderResponse:
    """Place an order for a customer."""
    command = CreateOrderCommand(
        customer_id=request.customer_id,
        asset_name=request.asset_name,
        side=request.side,
        size=request.size,
        price=request.price,
    )
    return _order_response(use_case.execute(command))


@orders_router.get(
    "",
    response_model=list[OrderResponse],
    responses={400: {"model": ErrorResponse}},
    summary="List orders",
    description="List a customer's orders, newest first, optionally within a date range.",
)
def list_orders(
    customer_id: CustomerId,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    use_case: ListOrdersUseCase = Depends(get_list_orders_use_case),
) -> list[OrderResponse]:
    """List orders of a customer."""
    query = ListOrdersQuery(
        customer_id=customer_id,
        start_date=start_date,
        end_date=end_date,
    )
    return [_order_response(r) for r in use_case.execute(query)]


@orders_router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get an order",
)
def get_order(
    order_id: str,
    customer_id: CustomerId,
    use_case: GetOrderUseCase = Depends(get_order_use_case),
) -> OrderResponse:
    """Return one order of a customer."""
    query = GetOrderQuery(order_id=order_id, customer_id=customer_id)
    return _order_response(use_case.execute(query))


@orders_router.delete(
    "/{order_id}",
    status_code=204,
    response_class=Response,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Cancel an order",
    description="Cancel a PENDING order and release its reservation.",
)
def cancel_order(
    order_id: str,
    customer_id: CustomerId,
    use_case: CancelOrderUseCase = Depends(get_cancel_order_use_case),
) -> Response:
    """Cancel a pending order of a customer."""
    use_case.execute(CancelOrderCommand(order_id=order_id, customer_id=customer_id))
    return Response(status_code=204)


@assets_router.get(
    "",
    response_model=list[BalanceResponse],
    summary="List balances",
)
def list_assets(
    customer_id: CustomerId,
    use_case: ListBalancesUseCase = Depends(get_list_balances_use_case),
) -> list[BalanceResponse]:
    """List all asset balances of a customer."""
    results = use_case.execute(ListBalancesQuery(customer_id=customer_id))
    return [_balance_response(r) for r in results]


@assets_router.get(
    "/{asset_name}",
    response_model=BalanceResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a balance",
)
def get_asset(
    asset_name: str,
    customer_id: CustomerId,
    use_case: GetBalanceUseCase = Depends(get_balance_use_case),
) -> BalanceResponse:
    """Return one asset balance of a customer."""
    query = GetBalanceQuery(customer_id=customer_id, asset_name=asset_name)
    return _balance_response(use_case.execute(query))


@admin_router.post(
    "/match-order",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Match an order",
    description="Settle a PENDING order and mark it MATCHED.",
)
def match_order(
    request: MatchOrderRequest,
    use_case: MatchOrderUseCase = Depends(get_match_order_use_case),
) -> OrderResponse:
    """Match a pending order by id given in the body."""
    return _order_response(use_case.execute(MatchOrderCommand(order_id=request.order_id)))


@admin_router.post(
    "/orders/{order_id}/match",
    response_model=OrderResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Match an order by path",
)
def match_order_by_id(
    order_id: str,
    use_case: MatchOrderUseCase = Depends(get_match_order_use_case),
) -> OrderResponse:
    """Match a pending order by id given in the path."""
    return _order_response(use_case.execute(MatchOrderCommand(order_id=order_id)))


@admin_router.get(
    "/pending-orders",
    response_model=list[OrderResponse],
    summary="List pending orders",
    description="All PENDING orders, oldest first.",
)
def list_pending_orders(
    use_case: ListPendingOrdersUseCase = Depends(get_list_pending_orders_use_case),
) -> list[OrderResponse]:
    """Return the matching queue."""
    return [_order_response(r) for r in use_case.execute()]


@admin_router.post(
    "/assets/deposit",
    response_model=BalanceResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Deposit an asset",
    description="Credit an asset to a customer, opening the balance if needed.",
)
def deposit_asset(
    request: DepositAssetRequest,
    use_case: DepositAssetUseCase = Depends(get_deposit_asset_use_case),
) -> BalanceResponse:
    """Credit an asset balance."""
    command = DepositAssetCommand(
        customer_id=request.customer_id,
        asset_name=request.asset_name,
        amount=request.amount,
    )
    return _balance_response(use_case.execute(command))
