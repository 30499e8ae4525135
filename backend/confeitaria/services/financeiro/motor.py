"""
Motor de agregação financeira

Funções puras: recebem transações, pedidos e produtos já carregados e devolvem
os números dos relatórios. Nada é cacheado; chamar duas vezes com a mesma
entrada devolve o mesmo resultado.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set, Tuple

from pydantic import BaseModel, Field

from confeitaria.core.config import settings
from confeitaria.core.dinheiro import money, percent_of
from confeitaria.core.erros import DataIntegrityWarning
from confeitaria.core.models import (
    TERMINAL_STATUSES,
    Order,
    OrderStatus,
    Product,
    Transaction,
    TransactionType,
    UnitType,
)
from confeitaria.services.financeiro.categorias import OUTROS, bucket_for
from confeitaria.services.financeiro.periodo import (
    DateRange,
    MonthSelector,
    Period,
    filter_orders_by_delivery,
    filter_transactions,
    resolve_period,
)
from confeitaria.services.pedidos.calculo import check_order_total, format_order_number
from confeitaria.services.pedidos.sinal import suggested_deposit

logger = logging.getLogger(__name__)

ZERO = money(0)


class CategoryBucket(BaseModel):
    category: str
    amount: Decimal
    percentage: Decimal


class OrderProfit(BaseModel):
    """Lucro bruto de um pedido entregue"""
    order_id: str
    order_number: str = ""
    client_name: Optional[str] = None
    delivery_date: Optional[date] = None
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin: Decimal


class GrossProfit(BaseModel):
    orders: List[OrderProfit] = Field(default_factory=list)
    revenue: Decimal = ZERO
    costs: Decimal = ZERO
    profit: Decimal = ZERO
    margin: Decimal = ZERO


class ProductRevenue(BaseModel):
    product_name: str
    revenue: Decimal


class ProductQuantity(BaseModel):
    product_name: str
    quantity: Decimal
    unit_type: UnitType = UnitType.UNIT


class TopProduct(BaseModel):
    product_name: str
    order_count: int
    quantity: Decimal
    revenue: Decimal


class FinancialSummary(BaseModel):
    """Resultado completo de uma agregação"""
    period: Period
    selected_month: Optional[MonthSelector] = None
    start: Optional[date] = None
    end: Optional[date] = None
    income: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO
    income_by_category: List[CategoryBucket] = Field(default_factory=list)
    expense_by_category: List[CategoryBucket] = Field(default_factory=list)
    gross_profit: GrossProfit = Field(default_factory=GrossProfit)
    product_revenue: List[ProductRevenue] = Field(default_factory=list)
    product_revenue_total: Decimal = ZERO
    product_quantities: List[ProductQuantity] = Field(default_factory=list)
    top_products: List[TopProduct] = Field(default_factory=list)
    delivered_orders_count: int = 0
    warnings: List[DataIntegrityWarning] = Field(default_factory=list)


class MonthTotals(BaseModel):
    month: MonthSelector
    income: Decimal = ZERO
    expense: Decimal = ZERO
    balance: Decimal = ZERO


class MonthComparison(BaseModel):
    current: MonthTotals
    previous: MonthTotals
    income_variation: Decimal
    expense_variation: Decimal
    balance_variation: Decimal


class DashboardIndicators(BaseModel):
    active_orders_count: int = 0
    active_orders_value: Decimal = ZERO
    pending_deposits_count: int = 0
    pending_deposits_value: Decimal = ZERO
    fully_paid_orders_count: int = 0
    fully_paid_orders_value: Decimal = ZERO


# ---------------------------------------------------------------------------
# Blocos da agregação
# ---------------------------------------------------------------------------

def totals_by_type(transactions: Iterable[Transaction]) -> Tuple[Decimal, Decimal]:
    """(receitas, despesas)"""
    income = Decimal("0")
    expense = Decimal("0")
    for t in transactions:
        if t.type == TransactionType.INCOME:
            income += t.amount
        else:
            expense += t.amount
    return money(income), money(expense)


def category_breakdown(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> List[CategoryBucket]:
    """
    Soma por categoria para um tipo.
    Categoria ausente ou fora do vocabulário vai para "Outros".
    Ordenado por valor decrescente.
    """
    buckets: Dict[str, Decimal] = defaultdict(Decimal)
    for t in transactions:
        if t.type != transaction_type:
            continue
        buckets[bucket_for(t.category, transaction_type)] += t.amount

    total = sum(buckets.values(), Decimal("0"))
    itens = sorted(buckets.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        CategoryBucket(category=cat, amount=money(valor), percentage=percent_of(valor, total))
        for cat, valor in itens
    ]


def _delivered(orders: Iterable[Order]) -> List[Order]:
    return [o for o in orders if o.status == OrderStatus.DELIVERED]


def order_cost(
    order: Order,
    products_by_id: Dict[str, Product],
    warnings: Optional[List[DataIntegrityWarning]] = None,
) -> Decimal:
    """
    Custo dos itens não-brinde (custo do produto * quantidade).
    Produto ausente custa 0 e gera aviso.
    """
    custo = Decimal("0")
    for item in order.items:
        if item.is_gift:
            continue
        produto = products_by_id.get(item.product_id) if item.product_id else None
        if produto is None:
            if warnings is not None:
                warnings.append(DataIntegrityWarning(
                    code="MISSING_PRODUCT",
                    message=(
                        f"Item '{item.product_name}' do pedido {order.id} sem produto "
                        f"cadastrado ({item.product_id or 'sem id'}); custo considerado 0"
                    ),
                    ref_id=order.id,
                ))
            continue
        custo += produto.cost_price * item.quantity
    return money(custo)


def gross_profit(
    delivered_orders: Iterable[Order],
    products_by_id: Dict[str, Product],
    warnings: Optional[List[DataIntegrityWarning]] = None,
) -> GrossProfit:
    """Lucro bruto por pedido entregue, ordenado por lucro decrescente."""
    linhas: List[OrderProfit] = []
    for order in delivered_orders:
        receita = money(order.total_amount)
        custo = order_cost(order, products_by_id, warnings)
        lucro = money(receita - custo)
        linhas.append(OrderProfit(
            order_id=order.id,
            order_number=format_order_number(order.order_number),
            client_name=order.client_name,
            delivery_date=order.delivery_date,
            revenue=receita,
            cost=custo,
            profit=lucro,
            margin=percent_of(lucro, receita),
        ))

    linhas.sort(key=lambda l: (-l.profit, l.order_id))

    receita_total = money(sum((l.revenue for l in linhas), Decimal("0")))
    custo_total = money(sum((l.cost for l in linhas), Decimal("0")))
    lucro_total = money(receita_total - custo_total)
    return GrossProfit(
        orders=linhas,
        revenue=receita_total,
        costs=custo_total,
        profit=lucro_total,
        margin=percent_of(lucro_total, receita_total),
    )


def product_revenue_ranking(
    delivered_orders: Iterable[Order],
    limit: int = 6,
) -> Tuple[List[ProductRevenue], Decimal]:
    """
    Receita por nome de produto (itens não-brinde), top `limit` + "Outros".

    O bucket "Outros" recebe exatamente a soma do restante, então a soma da
    lista é sempre igual ao total.

    Returns:
        Tupla (ranking, receita_total)
    """
    por_produto: Dict[str, Decimal] = defaultdict(Decimal)
    for order in delivered_orders:
        for item in order.items:
            if item.is_gift:
                continue
            por_produto[item.product_name] += item.line_total

    ordenado = sorted(por_produto.items(), key=lambda kv: (-kv[1], kv[0]))
    total = money(sum(por_produto.values(), Decimal("0")))

    topo = [ProductRevenue(product_name=nome, revenue=money(valor)) for nome, valor in ordenado[:limit]]
    resto = ordenado[limit:]
    if resto:
        # Complemento do total para não acumular diferença de arredondamento
        soma_topo = sum((p.revenue for p in topo), Decimal("0"))
        topo.append(ProductRevenue(product_name=OUTROS, revenue=money(total - soma_topo)))
    return topo, total


def product_quantity_ranking(delivered_orders: Iterable[Order]) -> List[ProductQuantity]:
    """Quantidade vendida por produto, com a unidade do primeiro item visto."""
    quantidades: Dict[str, Decimal] = defaultdict(Decimal)
    unidades: Dict[str, UnitType] = {}
    for order in delivered_orders:
        for item in order.items:
            if item.is_gift:
                continue
            quantidades[item.product_name] += item.quantity
            unidades.setdefault(item.product_name, item.unit_type)

    ordenado = sorted(quantidades.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        ProductQuantity(product_name=nome, quantity=qtd, unit_type=unidades[nome])
        for nome, qtd in ordenado
    ]


def top_products(delivered_orders: Iterable[Order], limit: int = 5) -> List[TopProduct]:
    """Produtos presentes em mais pedidos distintos."""
    pedidos: Dict[str, Set[str]] = defaultdict(set)
    quantidades: Dict[str, Decimal] = defaultdict(Decimal)
    receitas: Dict[str, Decimal] = defaultdict(Decimal)
    for order in delivered_orders:
        for item in order.items:
            if item.is_gift:
                continue
            pedidos[item.product_name].add(order.id)
            quantidades[item.product_name] += item.quantity
            receitas[item.product_name] += item.line_total

    ranking = [
        TopProduct(
            product_name=nome,
            order_count=len(ids),
            quantity=quantidades[nome],
            revenue=money(receitas[nome]),
        )
        for nome, ids in pedidos.items()
    ]
    ranking.sort(key=lambda p: (-p.order_count, -p.revenue, p.product_name))
    return ranking[:limit]


# ---------------------------------------------------------------------------
# Entradas públicas
# ---------------------------------------------------------------------------

def aggregate(
    transactions: Iterable[Transaction],
    orders: Iterable[Order],
    products: Iterable[Product],
    period: Period,
    today: date,
    selected_month: Optional[MonthSelector] = None,
    ranking_limit: Optional[int] = None,
    top_limit: Optional[int] = None,
) -> FinancialSummary:
    """
    Agrega transações e pedidos no período.

    Args:
        transactions: Lançamentos do usuário
        orders: Pedidos com itens
        products: Catálogo (para custo)
        period: week, month, year ou all
        today: Data de referência para os presets
        selected_month: Mês explícito; tem precedência sobre `period`

    Returns:
        FinancialSummary com avisos de integridade coletados
    """
    if ranking_limit is None:
        ranking_limit = settings.product_ranking_limit
    if top_limit is None:
        top_limit = settings.top_products_limit

    period = Period(period)
    janela: DateRange = resolve_period(period, today, selected_month)
    warnings: List[DataIntegrityWarning] = []

    todos_pedidos = list(orders)
    cancelados = {o.id for o in todos_pedidos if o.status == OrderStatus.CANCELLED}

    txs, avisos_datas = filter_transactions(transactions, janela)
    warnings.extend(avisos_datas)
    # Lançamentos de pedidos cancelados não contam
    txs = [t for t in txs if t.order_id is None or t.order_id not in cancelados]

    entregues = _delivered(filter_orders_by_delivery(todos_pedidos, janela))

    for order in entregues:
        aviso = check_order_total(order)
        if aviso is not None:
            warnings.append(aviso)

    products_by_id = {p.id: p for p in products}

    income, expense = totals_by_type(txs)
    ranking, receita_produtos = product_revenue_ranking(entregues, ranking_limit)

    summary = FinancialSummary(
        period=period,
        selected_month=selected_month,
        start=janela.start,
        end=janela.end,
        income=income,
        expense=expense,
        balance=money(income - expense),
        income_by_category=category_breakdown(txs, TransactionType.INCOME),
        expense_by_category=category_breakdown(txs, TransactionType.EXPENSE),
        gross_profit=gross_profit(entregues, products_by_id, warnings),
        product_revenue=ranking,
        product_revenue_total=receita_produtos,
        product_quantities=product_quantity_ranking(entregues),
        top_products=top_products(entregues, top_limit),
        delivered_orders_count=len(entregues),
        warnings=warnings,
    )

    for aviso in warnings:
        logger.warning(f"[{aviso.code}] {aviso.message}")

    logger.info(
        f"Agregação {period.value}: {len(txs)} transações, {len(entregues)} pedidos entregues, "
        f"{len(warnings)} avisos"
    )
    return summary


def _variacao(atual: Decimal, anterior: Decimal) -> Decimal:
    if anterior == 0:
        return money(100) if atual != 0 else ZERO
    return money((atual - anterior) / abs(anterior) * 100)


def _totais_do_mes(transactions: List[Transaction], mes: MonthSelector) -> MonthTotals:
    janela = DateRange(start=mes.first_day, end=mes.last_day)
    txs = [t for t in transactions if t.date is not None and janela.contains(t.date)]
    income, expense = totals_by_type(txs)
    return MonthTotals(month=mes, income=income, expense=expense, balance=money(income - expense))


def month_comparison(
    transactions: Iterable[Transaction],
    today: date,
    selected_month: Optional[MonthSelector] = None,
) -> MonthComparison:
    """
    Mês selecionado (ou o mês de `today`) contra o mês anterior.

    Variação com mês anterior zerado é 100 quando o atual não é zero.
    A variação do saldo divide pelo valor absoluto do saldo anterior.
    """
    atual_mes = selected_month or MonthSelector(month=today.month, year=today.year)
    txs = list(transactions)
    atual = _totais_do_mes(txs, atual_mes)
    anterior = _totais_do_mes(txs, atual_mes.previous())
    return MonthComparison(
        current=atual,
        previous=anterior,
        income_variation=_variacao(atual.income, anterior.income),
        expense_variation=_variacao(atual.expense, anterior.expense),
        balance_variation=_variacao(atual.balance, anterior.balance),
    )


def dashboard_indicators(orders: Iterable[Order], deposit_percentage=None) -> DashboardIndicators:
    """Pedidos ativos, sinais pendentes e pedidos quitados (não terminais)."""
    ind = DashboardIndicators()
    ativos_valor = Decimal("0")
    pendentes_valor = Decimal("0")
    quitados_valor = Decimal("0")

    for order in orders:
        if order.status in TERMINAL_STATUSES:
            continue
        ind.active_orders_count += 1
        ativos_valor += order.total_amount
        if order.full_payment_received:
            ind.fully_paid_orders_count += 1
            quitados_valor += order.total_amount
        elif not order.deposit_paid:
            ind.pending_deposits_count += 1
            pendentes_valor += suggested_deposit(order.total_amount, deposit_percentage)

    ind.active_orders_value = money(ativos_valor)
    ind.pending_deposits_value = money(pendentes_valor)
    ind.fully_paid_orders_value = money(quitados_valor)
    return ind
