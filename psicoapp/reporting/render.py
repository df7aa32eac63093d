"""Plain-text rendering of a generated report."""

from __future__ import annotations

from typing import Sequence

from psicoapp.domain.models import BasicKpis, PatientAggregate, Period, RevenueByPriceType
from psicoapp.utils.dates import format_display_date

REPORT_TITLE = "RELATÓRIO DE AGENDAMENTOS"
SIGNATURE = "Relatório gerado pelo PsicoApp 𝚿"
NO_APPOINTMENTS = "Nenhum agendamento encontrado neste período."


def format_money(value: float) -> str:
    """Format as Brazilian reais, e.g. ``R$ 1.234,56``."""
    grouped = f"{value:,.2f}"
    return "R$ " + grouped.replace(",", "_").replace(".", ",").replace("_", ".")


def render_report_text(
    basic_kpis: BasicKpis | None,
    revenue_by_price_type: RevenueByPriceType | None,
    patient_aggregates: Sequence[PatientAggregate],
    period: Period,
) -> str:
    """Assemble the shareable report text."""
    lines = [
        REPORT_TITLE,
        "",
        f"Período: {format_display_date(period.start.date())} a {format_display_date(period.end.date())}",
        "",
    ]

    if basic_kpis is not None:
        lines.extend(
            [
                "=== TOTAIS ===",
                f"Consultas: {basic_kpis.session_count}",
                f"Consultas canceladas: {basic_kpis.canceled_count}",
                f"Faturamento total: {format_money(basic_kpis.total_revenue)}",
                f"Ticket médio: {format_money(basic_kpis.avg_ticket)}",
                "",
            ]
        )

    if revenue_by_price_type is not None:
        breakdown = revenue_by_price_type
        lines.extend(
            [
                "=== SOCIAL vs INTEGRAL ===",
                f"Valor social - Pacientes: {breakdown.social_count} | "
                f"Valor {format_money(breakdown.social_revenue)}",
                f"Valor Integral - Pacientes: {breakdown.full_count} | "
                f"Valor {format_money(breakdown.full_revenue)}",
                "",
            ]
        )

    if patient_aggregates:
        lines.append("=== AGENDAMENTOS DETALHADOS ===")
        for index, aggregate in enumerate(patient_aggregates, start=1):
            lines.extend(
                [
                    f"{index}. Paciente: {aggregate.name}",
                    f"   Tipo: {'Social' if aggregate.is_social else 'Integral'}",
                    f"   Sessões: {aggregate.total_sessions}",
                    f"   Total: {format_money(aggregate.total_amount)}",
                    "",
                ]
            )
    else:
        lines.append(NO_APPOINTMENTS)

    lines.extend(["", "---", SIGNATURE])
    return "\n".join(lines)
