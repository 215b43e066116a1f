"""
Streamlit Frontend for FinWise

Pages:
- Login / Sign up (before authentication)
- Dashboard: expenses, savings goals, investments, emergency fund
- AI Advisor: chat backed by the advice generator
- Learn: quiz, quotes and blog links
- Settings: currency, dark mode, connection status, logout

Tracker state lives in st.session_state and is discarded on logout.
Every async call runs on its own short-lived event loop (run_async), so
gateway calls drain the gateway's background tasks before returning.
"""

import asyncio

import streamlit as st

from finwise.agents import QuizSession, score_message
from finwise.config import validate_all_settings
from finwise.currency import CURRENCIES, get_currency_symbol
from finwise.models.finance import ExpenseCategory, InvestmentType, SavingsFrequency
from finwise.orchestrator import AppComponents, ChatSession, create_app_components
from finwise.services.auth import AuthError
from finwise.trackers import (
    EmergencyFundTracker,
    ExpenseTracker,
    InvestmentPortfolio,
    SavingsGoalTracker,
)


# Page configuration
st.set_page_config(
    page_title="FinWise",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

LIGHT_CSS = """
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.2em;
        font-weight: bold;
    }
    .quote-box {
        padding: 16px;
        border-left: 5px solid #4f46e5;
        border-radius: 8px;
        margin: 10px 0;
        background-color: #eef2ff;
    }
</style>
"""

DARK_CSS = """
<style>
    .stApp {
        background-color: #111827;
        color: #f9fafb;
    }
    .quote-box {
        background-color: #1f2937;
    }
</style>
"""


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def run_gateway(components: AppComponents, coro):
    """Run a gateway call and wait for its fire-and-forget work."""
    async def _run():
        try:
            return await coro
        finally:
            await components.gateway.wait_for_background()

    return run_async(_run())


def get_components() -> AppComponents:
    """Per-browser-session components (the gateway holds the signed-in user)."""
    if "components" not in st.session_state:
        components = create_app_components(use_storage=True)
        st.session_state.components = components
        st.session_state.auth_session = None
        if components.gateway is not None:
            components.gateway.subscribe(_on_auth_change)
    return st.session_state.components


def _on_auth_change(session):
    st.session_state.auth_session = session


def init_trackers():
    if "expenses" not in st.session_state:
        st.session_state.expenses = ExpenseTracker()
    if "savings" not in st.session_state:
        st.session_state.savings = SavingsGoalTracker()
    if "investments" not in st.session_state:
        st.session_state.investments = InvestmentPortfolio()
    if "emergency_fund" not in st.session_state:
        st.session_state.emergency_fund = EmergencyFundTracker()


def clear_user_state():
    for key in ("expenses", "savings", "investments", "emergency_fund", "chat", "learning", "quiz"):
        st.session_state.pop(key, None)


def main():
    """Main application entry point."""
    components = get_components()

    dark_mode = components.local_store.get_dark_mode()
    st.markdown(LIGHT_CSS, unsafe_allow_html=True)
    if dark_mode:
        st.markdown(DARK_CSS, unsafe_allow_html=True)

    st.sidebar.title("💰 FinWise")
    st.sidebar.markdown("---")

    if components.gateway is None:
        st.title("💰 FinWise")
        st.error(
            "Sign-in is not configured. Set FIREBASE_API_KEY in your `.env` file "
            "(see `.env.example`)."
        )
        return

    session = st.session_state.auth_session
    if session is None:
        page = st.sidebar.radio("Welcome", ["🔑 Login", "📝 Sign Up"], index=0)
        if page == "🔑 Login":
            render_login_page(components)
        else:
            render_signup_page(components)
        return

    init_trackers()
    profile = session.profile
    st.sidebar.markdown(f"Signed in as **{profile.full_name}**")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🤖 AI Advisor", "📚 Learn", "⚙️ Settings"],
        index=0,
    )

    symbol = get_currency_symbol(profile.currency)
    if page == "📊 Dashboard":
        render_dashboard_page(symbol)
    elif page == "🤖 AI Advisor":
        render_advisor_page(components)
    elif page == "📚 Learn":
        render_learn_page(components)
    elif page == "⚙️ Settings":
        render_settings_page(components, profile, dark_mode)


# =============================================================================
# Authentication
# =============================================================================

def render_login_page(components: AppComponents):
    """Render the login page."""
    st.title("🔑 Welcome back")

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        with st.spinner("Signing you in..."):
            try:
                run_gateway(components, components.gateway.sign_in(email, password))
                st.rerun()
            except AuthError as e:
                st.error(e.message)


def render_signup_page(components: AppComponents):
    """Render the sign-up page."""
    st.title("📝 Create your account")

    with st.form("signup_form"):
        col1, col2 = st.columns(2)
        with col1:
            first_name = st.text_input("First name")
        with col2:
            last_name = st.text_input("Last name")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password", help="At least 6 characters")
        submitted = st.form_submit_button("Sign up", type="primary")

    if submitted:
        with st.spinner("Creating your account..."):
            try:
                run_gateway(
                    components,
                    components.gateway.sign_up(first_name, last_name, email, password),
                )
                st.rerun()
            except AuthError as e:
                st.error(e.message)


# =============================================================================
# Dashboard
# =============================================================================

def render_dashboard_page(symbol: str):
    """Render the four trackers."""
    st.title("📊 Dashboard")

    expenses_tab, savings_tab, investments_tab, fund_tab = st.tabs(
        ["💸 Expenses", "🎯 Savings Goals", "📈 Investments", "🛟 Emergency Fund"]
    )
    with expenses_tab:
        render_expenses(st.session_state.expenses, symbol)
    with savings_tab:
        render_savings(st.session_state.savings, symbol)
    with investments_tab:
        render_investments(st.session_state.investments, symbol)
    with fund_tab:
        render_emergency_fund(st.session_state.emergency_fund, symbol)


def render_reset(label: str, key: str, reset):
    with st.expander(f"Reset {label}"):
        confirmed = st.checkbox(f"Yes, delete all {label.lower()}", key=f"{key}_confirm")
        if st.button(f"Reset {label}", key=f"{key}_reset"):
            if reset(confirmed=confirmed):
                st.rerun()
            else:
                st.warning("Please confirm the reset first.")


def render_expenses(tracker: ExpenseTracker, symbol: str):
    st.markdown(
        f'<div class="big-number">{symbol}{tracker.total:,.2f}</div>Total expenses',
        unsafe_allow_html=True,
    )

    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input(f"Amount ({symbol})")
        with col2:
            category = st.selectbox(
                "Category",
                options=list(ExpenseCategory),
                format_func=lambda c: c.value,
            )
        description = st.text_input("Description (optional)")
        if st.form_submit_button("Add expense"):
            if tracker.add(amount, category, description) is None:
                st.error("Please enter a valid amount")
            else:
                st.rerun()

    labels, values = tracker.chart_series()
    if labels:
        st.bar_chart(
            {"Category": labels, "Amount": [float(v) for v in values]},
            x="Category",
            y="Amount",
        )
        st.markdown("#### Recent expenses")
        for expense in tracker.recent():
            st.markdown(
                f"- **{symbol}{expense.amount:,.2f}** · {expense.category.value}"
                f" · {expense.description or '—'} · {expense.date:%d %b %Y}"
            )

    render_reset("Expenses", "expenses", tracker.reset)


def render_savings(tracker: SavingsGoalTracker, symbol: str):
    st.markdown(
        f'<div class="big-number">{symbol}{tracker.total_saved:,.2f}</div>Saved across goals',
        unsafe_allow_html=True,
    )

    with st.form("savings_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        col1, col2, col3 = st.columns(3)
        with col1:
            target = st.text_input(f"Target ({symbol})")
        with col2:
            contribution = st.text_input(f"Contribution ({symbol})")
        with col3:
            frequency = st.selectbox(
                "Frequency",
                options=list(SavingsFrequency),
                index=list(SavingsFrequency).index(SavingsFrequency.MONTHLY),
                format_func=lambda f: f.value.title(),
            )
        if st.form_submit_button("Add goal"):
            if tracker.add(name, target, contribution, frequency) is None:
                st.error("Please enter a name and valid amounts")
            else:
                st.rerun()

    for goal in tracker.goals:
        st.markdown(
            f"**{goal.name}** · {symbol}{goal.current_amount:,.2f} of "
            f"{symbol}{goal.target_amount:,.2f} ({goal.frequency.value})"
        )
        st.progress(int(tracker.display_progress(goal)))
        if st.button(f"Add {symbol}{goal.contribution_amount:,.2f}", key=f"contribute_{goal.id}"):
            tracker.contribute(goal.id)
            st.rerun()

    render_reset("Savings Goals", "savings", tracker.reset)


def render_investments(portfolio: InvestmentPortfolio, symbol: str):
    st.markdown(
        f'<div class="big-number">{symbol}{portfolio.total:,.2f}</div>Total invested',
        unsafe_allow_html=True,
    )

    with st.form("investment_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            investment_type = st.selectbox(
                "Type",
                options=list(InvestmentType),
                format_func=lambda t: t.value,
            )
        with col2:
            amount = st.text_input(f"Amount ({symbol})")
        if st.form_submit_button("Add investment"):
            if portfolio.add(investment_type, amount) is None:
                st.error("Please enter a valid amount")
            else:
                st.rerun()

    labels, values = portfolio.chart_series()
    if labels:
        st.bar_chart(
            {"Type": labels, "Amount": [float(v) for v in values]},
            x="Type",
            y="Amount",
        )

    render_reset("Investments", "investments", portfolio.reset)


def render_emergency_fund(tracker: EmergencyFundTracker, symbol: str):
    fund = tracker.fund
    col1, col2, col3 = st.columns(3)
    col1.metric("Current", f"{symbol}{fund.current_amount:,.2f}")
    col2.metric("Target", f"{symbol}{fund.target_amount:,.2f}")
    months = tracker.months_to_goal
    col3.metric("Months to goal", "—" if months is None else max(months, 0))

    st.progress(int(tracker.display_progress))
    st.caption(
        f"{symbol}{tracker.remaining:,.2f} to go · last contribution "
        f"{fund.last_contribution:%d %b %Y}"
    )

    if st.button(f"Add monthly contribution ({symbol}{fund.monthly_contribution:,.2f})"):
        tracker.add_contribution()
        st.rerun()

    with st.form("fund_target_form"):
        new_target = st.text_input(f"New target ({symbol})")
        if st.form_submit_button("Update target"):
            if tracker.adjust_target(new_target):
                st.rerun()
            else:
                st.error("Please enter a valid amount")

    render_reset("Emergency Fund", "fund", tracker.reset)


# =============================================================================
# AI Advisor
# =============================================================================

def render_advisor_page(components: AppComponents):
    """Render the advisor chat."""
    st.title("🤖 AI Financial Advisor")

    if "chat" not in st.session_state:
        st.session_state.chat = ChatSession(components.advice_generator)
    chat: ChatSession = st.session_state.chat

    if components.advice_generator is None:
        st.info("The advisor is not configured. Check the Settings page.")

    for message in chat.messages:
        with st.chat_message("user" if message.sender.value == "user" else "assistant"):
            st.markdown(message.text)

    question = st.chat_input("Ask about your finances...", disabled=chat.is_awaiting)
    if question:
        with st.spinner("Thinking..."):
            run_async(chat.submit(question))
        st.rerun()


# =============================================================================
# Learn
# =============================================================================

def render_learn_page(components: AppComponents):
    """Render quiz, quotes and blogs."""
    st.title("📚 Learn")

    if st.button("🔄 Refresh content") or "learning" not in st.session_state:
        with st.spinner("Loading fresh content..."):
            st.session_state.learning = run_async(components.content_loader.load_all())
            st.session_state.quiz = QuizSession(st.session_state.learning.quiz.items)

    content = st.session_state.learning
    quiz: QuizSession = st.session_state.quiz

    quiz_tab, quotes_tab, blogs_tab = st.tabs(["🧠 Quiz", "💬 Quotes", "📰 Blogs"])

    with quiz_tab:
        if content.quiz.is_fallback:
            st.caption("Showing our starter quiz.")
        render_quiz(quiz)

    with quotes_tab:
        for quote in content.quotes.items:
            st.markdown(
                f'<div class="quote-box">“{quote.text}”<br/><em>— {quote.author}</em></div>',
                unsafe_allow_html=True,
            )

    with blogs_tab:
        for blog in content.blogs.items:
            st.markdown(f"**[{blog.title}]({blog.url})**  \n{blog.source} · {blog.date}")


def render_quiz(quiz: QuizSession):
    total = len(quiz.questions)

    if quiz.is_finished:
        st.subheader(f"Your score: {quiz.score}/{total}")
        st.markdown(score_message(quiz.percentage))
        for question, choice in zip(quiz.questions, quiz.answers):
            icon = "✅" if choice == question.correct_answer else "❌"
            with st.expander(f"{icon} {question.question}"):
                st.markdown(f"Your answer: {question.options[choice]}")
                st.markdown(f"Correct answer: {question.options[question.correct_answer]}")
                if question.explanation:
                    st.caption(question.explanation)
        if st.button("Try again"):
            quiz.restart()
            st.rerun()
        return

    question = quiz.current_question
    st.caption(f"Question {quiz.current_index + 1} of {total} · Score: {quiz.score}/{quiz.current_index}")
    st.markdown(f"### {question.question}")
    for index, option in enumerate(question.options):
        if st.button(option, key=f"quiz_{quiz.current_index}_{index}"):
            correct = quiz.answer(index)
            if correct:
                st.toast("Correct! 🎉")
            else:
                st.toast(f"The answer was: {question.options[question.correct_answer]}")
            st.rerun()


# =============================================================================
# Settings
# =============================================================================

def render_settings_page(components: AppComponents, profile, dark_mode: bool):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Profile")
    st.markdown(f"**Name:** {profile.full_name}")
    st.markdown(f"**Email:** {profile.email or '—'}")

    codes = [currency.code for currency in CURRENCIES]
    current_index = codes.index(profile.currency) if profile.currency in codes else 0
    selected = st.selectbox(
        "Currency",
        options=list(CURRENCIES),
        index=current_index,
        format_func=lambda c: f"{c.symbol} {c.code} · {c.name}",
    )
    if selected.code != profile.currency:
        if run_gateway(components, components.gateway.update_currency(selected.code)):
            st.success(f"Currency updated to {selected.code}")
            st.rerun()
        else:
            st.error("Couldn't update your currency. Please try again.")

    st.markdown("### Appearance")
    enabled = st.toggle("Dark mode", value=dark_mode)
    if enabled != dark_mode:
        components.local_store.set_dark_mode(enabled)
        st.rerun()

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Firebase (Sign-in)", "firebase"),
        ("Google Sheets (Profiles)", "google_sheets"),
        ("Gemini (AI)", "gemini"),
        ("OpenAI (Learn)", "openai"),
        ("Open Bank Project (Banking)", "openbank"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.warning(f"⚠️ {name} - {error}")

    st.markdown("---")
    if st.button("🚪 Log out", type="primary"):
        run_gateway(components, components.gateway.sign_out())
        clear_user_state()
        st.rerun()


if __name__ == "__main__":
    main()
