import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import date, datetime
from uuid import uuid4

import streamlit as st
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from expense_tracker.config import get_settings
from expense_tracker.dates import date_presets, friendly_month
from expense_tracker.domain import INCOME_SOURCES, UNKNOWN_CATEGORY, Category, Expense, Income
from expense_tracker.filters import ExpenseFilters, IncomeFilters
from expense_tracker.log import setup_logging
from expense_tracker.services import DashboardService, ReportService
from expense_tracker.sources import SeedDataSource

settings = get_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(page_title=settings.app_title, layout="wide")


def money(x: float) -> str:
    return f"{x:,.2f} {settings.currency}"


if "source" not in st.session_state:
    st.session_state.source = SeedDataSource.from_seed(settings.seed_path)
    st.session_state.dashboard_service = DashboardService(
        st.session_state.source,
        top_limit=settings.top_categories_limit,
        recent_limit=settings.recent_activity_limit,
    )

source: SeedDataSource = st.session_state.source
dashboard_service: DashboardService = st.session_state.dashboard_service
categories = asyncio.run(source.get_categories())
category_names = {c.id: c.name for c in categories}
today = date.today()
presets = date_presets(today)


def expenses_df(expenses) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Date": e.date.isoformat(),
                "Category": category_names.get(e.category_id, UNKNOWN_CATEGORY),
                "Description": e.description,
                "Amount": money(e.amount),
            }
            for e in expenses
        ],
        columns=["Date", "Category", "Description", "Amount"],
    )


def income_df(income) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Date": i.date.isoformat(),
                "Source": i.source,
                "Description": i.description,
                "Amount": money(i.amount),
            }
            for i in income
        ],
        columns=["Date", "Source", "Description", "Amount"],
    )


def preset_picker(key: str):
    labels = {"all": "All time", **{k: w.label for k, w in presets.items()}}
    choice = st.selectbox("Period", list(labels), format_func=labels.get, key=key)
    if choice == "all":
        return None, None
    return presets[choice].start, presets[choice].end


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "💸 Expenses", "💰 Income", "🗂 Categories", "📑 Reports"]
)

if menu == "🏠 Dashboard":
    st.title("🏠 Dashboard")
    st.caption("Overview of your finances for this month")

    data = asyncio.run(dashboard_service.dashboard(today))

    if data.error is not None:
        st.error("Failed to load dashboard data. Please try again.")
        if st.button("Retry"):
            asyncio.run(dashboard_service.refresh(today))
            st.rerun()
        st.stop()
    if data.is_loading:
        st.info("Loading...")
        st.stop()

    stats, charts, activity = data.stats, data.charts, data.activity

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Income", money(stats.total_income))
        st.caption(f"{stats.income_count} entries")
    with k2:
        st.metric("Total Expenses", money(stats.total_expenses))
        st.caption(f"{stats.expense_count} entries")
    with k3:
        st.metric("Balance", money(stats.balance))
        st.caption("Surplus" if stats.balance >= 0 else "Deficit")
    with k4:
        st.metric("Savings Rate", f"{stats.savings_rate:.1f}%")
        st.caption(f"{stats.categories_count} categories")

    a1, a2 = st.columns(2)
    a1.metric("Avg. monthly income (this year)", money(stats.average_monthly_income))
    a2.metric("Avg. monthly expenses (this year)", money(stats.average_monthly_expenses))

    col_trend, col_pie = st.columns(2)
    with col_trend:
        labels = [p.label for p in charts.monthly_trend]
        fig_trend = go.Figure()
        fig_trend.add_trace(go.Scatter(x=labels, y=[p.income for p in charts.monthly_trend], mode="lines+markers", name="Income"))
        fig_trend.add_trace(go.Scatter(x=labels, y=[p.expenses for p in charts.monthly_trend], mode="lines+markers", name="Expenses"))
        fig_trend.add_trace(go.Scatter(x=labels, y=[p.balance for p in charts.monthly_trend], mode="lines+markers", name="Balance"))
        fig_trend.update_layout(title="3-Month Trend", template="plotly_dark", margin=dict(t=40, b=10, l=10, r=10))
        st.plotly_chart(fig_trend, use_container_width=True)
        if any(p.estimated for p in charts.monthly_trend):
            st.caption("“2 months ago” is estimated from last month's totals.")

    with col_pie:
        if charts.expenses_by_category:
            df_cat = pd.DataFrame(
                [{"Category": ce.category_name, "Amount": ce.amount} for ce in charts.expenses_by_category]
            )
            color_map = {ce.category_name: ce.color for ce in charts.expenses_by_category if ce.color}
            fig_cat = px.pie(df_cat, values="Amount", names="Category", title="Expense Categories",
                             color="Category", color_discrete_map=color_map)
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expenses this month.")

    if charts.top_categories:
        df_top = pd.DataFrame(
            [
                {"Category": ce.category_name, "Amount": ce.amount, "Share": f"{ce.percentage:.1f}%"}
                for ce in charts.top_categories
            ]
        )
        fig_top = px.bar(df_top, x="Category", y="Amount", title="Top categories", template="plotly_dark")
        st.plotly_chart(fig_top, use_container_width=True)

    r1, r2 = st.columns(2)
    with r1:
        st.subheader("Recent Expenses")
        if activity.recent_expenses:
            st.table(expenses_df(activity.recent_expenses))
        else:
            st.info("No recent expenses")
    with r2:
        st.subheader("Recent Income")
        if activity.recent_income:
            st.table(income_df(activity.recent_income))
        else:
            st.info("No recent income")

elif menu == "💸 Expenses":
    st.title("💸 Expenses")

    col1, col2, col3 = st.columns(3)
    with col1:
        start, end = preset_picker("exp_period")
    with col2:
        cat_choice = st.selectbox("Category", ["All"] + [c.id for c in categories],
                                  format_func=lambda cid: category_names.get(cid, cid))
    with col3:
        text = st.text_input("Description contains")

    filters = ExpenseFilters(
        start_date=start,
        end_date=end,
        category_id=None if cat_choice == "All" else cat_choice,
        description=text or None,
    )
    expenses = asyncio.run(source.get_expenses(filters))
    if expenses:
        table = expenses_df(expenses)
        st.dataframe(table, use_container_width=True)
        st.download_button("⬇ Download CSV", table.to_csv(index=False), file_name="expenses.csv", mime="text/csv")
    else:
        st.info("No expenses match the selected filters")

    st.subheader("➕ Add Expense")
    with st.form("expense_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            exp_date = st.date_input("Date", value=today)
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with c2:
            cat_id = st.selectbox("Category", [c.id for c in categories],
                                  format_func=lambda cid: category_names.get(cid, cid))
            description = st.text_input("Description (optional)")
        if st.form_submit_button("Add Expense"):
            now = datetime.now()
            source.add_expense(Expense(
                id=str(uuid4()), amount=float(amount), date=exp_date, category_id=cat_id,
                description=description, created_at=now, updated_at=now,
            ))
            st.success("✅ Expense added!")
            st.rerun()

elif menu == "💰 Income":
    st.title("💰 Income")

    col1, col2 = st.columns(2)
    with col1:
        start, end = preset_picker("inc_period")
    with col2:
        source_choice = st.selectbox("Source", ["All"] + list(INCOME_SOURCES))

    filters = IncomeFilters(
        start_date=start,
        end_date=end,
        source=None if source_choice == "All" else source_choice,
    )
    income = asyncio.run(source.get_income(filters))
    if income:
        table = income_df(income)
        st.dataframe(table, use_container_width=True)
        st.download_button("⬇ Download CSV", table.to_csv(index=False), file_name="income.csv", mime="text/csv")
    else:
        st.info("No income matches the selected filters")

    st.subheader("➕ Add Income")
    with st.form("income_form", clear_on_submit=True):
        c1, c2 = st.columns(2)
        with c1:
            inc_date = st.date_input("Date", value=today)
            amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        with c2:
            inc_source = st.selectbox("Source", list(INCOME_SOURCES))
            description = st.text_input("Description (optional)")
        if st.form_submit_button("Add Income"):
            now = datetime.now()
            source.add_income(Income(
                id=str(uuid4()), amount=float(amount), date=inc_date, source=inc_source,
                description=description, created_at=now, updated_at=now,
            ))
            st.success("✅ Income added!")
            st.rerun()

elif menu == "🗂 Categories":
    st.title("🗂 Categories")
    if categories:
        st.table(pd.DataFrame(
            [{"Name": c.name, "Color": c.color or "-",
              "Created": c.created_at.strftime("%Y-%m-%d") if c.created_at else "-"} for c in categories]
        ))
    else:
        st.info("No categories yet")

    with st.form("category_form", clear_on_submit=True):
        name = st.text_input("Name")
        color = st.color_picker("Color", value="#42a5f5")
        if st.form_submit_button("Add Category") and name:
            now = datetime.now()
            source.add_category(Category(id=str(uuid4()), name=name, color=color, created_at=now, updated_at=now))
            st.success("✅ Category added!")
            st.rerun()

elif menu == "📑 Reports":
    st.title("📑 Reports")
    year = st.number_input("Year", min_value=2000, max_value=2100, value=today.year, step=1)
    report = asyncio.run(ReportService(source).yearly_report(int(year)))

    k1, k2, k3 = st.columns(3)
    k1.metric("Income", money(report.total_income))
    k2.metric("Expenses", money(report.total_expenses))
    k3.metric("Balance", money(report.total_balance))

    if report.months:
        df_month = pd.DataFrame(
            [
                {"Month": friendly_month(m.month), "Income": m.total_income,
                 "Expenses": m.total_expenses, "Balance": m.balance}
                for m in report.months
            ]
        )
        fig_m = px.bar(df_month, x="Month", y=["Income", "Expenses"], barmode="group",
                       title=f"Monthly totals {report.year}", template="plotly_dark")
        st.plotly_chart(fig_m, use_container_width=True)
        st.table(df_month)

        month_labels = {m.month: friendly_month(m.month) for m in report.months}
        picked = st.selectbox("Category breakdown for", list(month_labels), format_func=month_labels.get)
        breakdown = next(m for m in report.months if m.month == picked).expenses_by_category
        if breakdown:
            st.table(pd.DataFrame(
                [{"Category": ce.category_name, "Amount": money(ce.amount), "Share": f"{ce.percentage:.1f}%"}
                 for ce in breakdown]
            ))
        else:
            st.info("No expenses in this month")
    else:
        st.info(f"No transactions recorded in {report.year}")
