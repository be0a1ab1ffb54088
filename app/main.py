"""
Streamlit Frontend for Finance Tracker

A thin presentation layer over TransactionStore. Every number on the
page comes from the store's derived values; this module never computes
totals or filters on its own.

Layout:
1. Summary cards (income, expense, balance)
2. Budget banner with budget input
3. Add / edit form
4. Category filter + transaction list
5. Spending trend (last FINANCE_TREND_DAYS days)
"""

import asyncio
from datetime import datetime, time

import streamlit as st

from finance_tracker.config import get_settings
from finance_tracker.models.transaction import TransactionKind, TransactionRecord
from finance_tracker.services.ledger import LedgerError
from finance_tracker.store import TransactionStore, create_store


st.set_page_config(
    page_title="Finance Tracker",
    page_icon="💰",
    layout="wide",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_store() -> TransactionStore:
    """Build the store once per server process and load the ledger."""
    store = create_store()
    run_async(store.load_all())
    return store


def money(value) -> str:
    currency = get_settings().dashboard.currency_label
    return f"{currency} {value:,.2f}"


def render_summary(store: TransactionStore):
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(store.income_total))
    col2.metric("Expenses", money(store.expense_total))
    col3.metric("Balance", money(store.balance))


def render_budget(store: TransactionStore):
    st.subheader("Budget (This Month)")
    status = store.budget_status()

    col1, col2 = st.columns([3, 1])
    with col1:
        st.markdown(
            f"**Spent:** {money(status.month_to_date_expense)} / "
            f"**Budget:** {money(status.budget)}"
        )
        if status.over_budget:
            st.error("Over budget - consider reducing spending this month.")
        else:
            st.caption("On track - keep it up.")
    with col2:
        new_budget = st.number_input(
            "Set budget",
            min_value=0.0,
            value=float(store.budget),
            step=500.0,
        )
        if new_budget != float(store.budget):
            store.set_budget(new_budget)
            st.rerun()


def render_form(store: TransactionStore):
    editing = store.editing_target
    st.subheader("Edit Transaction" if editing else "Add Transaction")

    with st.form("transaction_form", clear_on_submit=editing is None):
        title = st.text_input("Title", value=editing.title if editing else "")
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            value=float(editing.amount) if editing else 0.0,
            step=100.0,
        )
        kinds = [k.value for k in TransactionKind]
        kind = st.selectbox(
            "Type",
            options=kinds,
            index=kinds.index(editing.kind.value) if editing else 1,
        )
        category = st.text_input("Category", value=editing.category if editing else "")
        day = st.date_input(
            "Date",
            value=editing.occurred_at.date() if editing else store.now().date(),
        )
        submitted = st.form_submit_button("Update" if editing else "Add")

    if editing and st.button("Cancel edit"):
        store.cancel_edit()
        st.rerun()

    if not submitted:
        return

    draft = {
        "title": title,
        "amount": amount,
        "kind": kind,
        "category": category,
        "occurred_at": datetime.combine(day, time(12, 0), tzinfo=store.now().tzinfo),
    }
    try:
        if editing:
            run_async(store.update(editing.id, draft))
            st.success("Transaction updated.")
        else:
            run_async(store.create(draft))
            st.success("Transaction added.")
    except LedgerError as e:
        # Form-level message; the page banner shows store.last_error too
        st.error(e.message)
        return
    st.rerun()


def render_row(store: TransactionStore, record: TransactionRecord):
    sign = "+" if record.kind == TransactionKind.INCOME else "-"
    col1, col2, col3, col4 = st.columns([4, 2, 1, 1])
    col1.markdown(
        f"**{record.title}**  \n"
        f"{record.category} · {record.occurred_at.strftime('%d %b %Y')}"
    )
    col2.markdown(f"{sign}{money(record.amount)}")
    if col3.button("Edit", key=f"edit-{record.id}"):
        store.begin_edit(record)
        st.rerun()
    if col4.button("Delete", key=f"delete-{record.id}"):
        try:
            run_async(store.remove(record.id))
        except LedgerError as e:
            st.error(e.message)
            return
        st.rerun()


def render_list(store: TransactionStore):
    st.subheader("Transactions")

    categories = store.categories
    current = store.active_filter
    options = categories if current in categories else [*categories, current]
    choice = st.selectbox("Category", options=options, index=options.index(current))
    if choice != current:
        store.set_active_filter(choice)
        st.rerun()

    records = store.filtered
    if not records:
        st.info("No transactions to show.")
        return
    for record in records:
        render_row(store, record)


def render_trend(store: TransactionStore):
    st.subheader("Spending Trend")
    series = store.filtered_trend()
    if not series.has_data:
        st.info(f"No expenses in the last {series.days} days yet.")
        return
    st.line_chart(
        {"day": series.labels, "Expenses": [float(v) for v in series.values]},
        x="day",
        y="Expenses",
    )


def main():
    """Main application entry point."""
    store = get_store()

    st.title("💰 Finance Tracker")
    if store.loading:
        st.caption("Loading...")
    if store.last_error:
        st.error(store.last_error)
    if st.button("Refresh"):
        run_async(store.load_all())
        st.rerun()

    render_summary(store)
    render_budget(store)

    left, right = st.columns([2, 3])
    with left:
        render_form(store)
    with right:
        render_trend(store)

    render_list(store)


if __name__ == "__main__":
    main()
