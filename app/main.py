"""
Streamlit Frontend for FinFamily

This is the interface the family uses day to day.

DESIGN PRINCIPLES:
1. The dashboard first: one card per module and the overall balance
2. Every module screen is scoped to one month, navigable back and forth
3. Clear error messages in simple language
4. Nothing changes on screen until the store has confirmed it

The screen is a pure rendering of two things kept in the session:
- the records snapshot (replaced after every confirmed change)
- the ViewState (replaced after every transition)
"""

import asyncio
from decimal import Decimal

import streamlit as st

from finfamily.audit import configure_logging, create_correlation_id
from finfamily.config import get_settings, validate_all_settings
from finfamily.identity import user_from_claims
from finfamily.models.record import ModuleId, Record, RecordKind
from finfamily.orchestrator import AppComponents, create_app_components
from finfamily.queries import (
    RecordProgress,
    advice_html,
    build_dashboard,
    build_module_month_view,
)
from finfamily.state import ViewState


# Page configuration
st.set_page_config(
    page_title="FinFamily",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .module-card {
        padding: 20px;
        border-radius: 12px;
        margin: 10px 0;
    }
    .module-card h4 {
        margin: 0 0 4px 0;
    }
    .big-number {
        font-size: 1.8em;
        font-weight: bold;
        color: #2c3e50;
    }
    .advice-box {
        padding: 20px;
        background-color: #eef2ff;
        border-radius: 10px;
        border-left: 5px solid #6366f1;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


KIND_LABELS = {
    RecordKind.INCOME: "Receita",
    RecordKind.EXPENSE: "Despesa",
    RecordKind.ASSET: "Ativo",
}

RISK_LABELS = {
    "Low": "🟢 Risco baixo",
    "Medium": "🟡 Risco médio",
    "High": "🔴 Risco alto",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_storage=True)
    except Exception as e:
        st.error(f"Falha ao inicializar: {e}")
        return create_app_components(use_storage=False)


def format_money(amount: Decimal) -> str:
    """Brazilian formatting: R$ 1.234,56"""
    symbol = get_settings().app.currency_symbol
    text = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{symbol} {text}"


def format_date(record: Record) -> str:
    year, month, day = record.date_parts
    return f"{day:02d}/{month:02d}/{year}"


# =============================================================================
# SESSION
# =============================================================================

def init_session(components: AppComponents, claims: dict):
    """Build the session for a newly signed-in user."""
    user = user_from_claims(claims)
    if user is None:
        return

    if st.session_state.get("user") and st.session_state.user.id == user.id:
        return

    correlation_id = create_correlation_id()
    run_async(components.audit_logger.log_user_signed_in(user.id, user.email))
    loaded = run_async(components.record_flow.load_records(user, correlation_id))

    st.session_state.user = user
    st.session_state.correlation_id = correlation_id
    st.session_state.records = loaded.records
    st.session_state.view_state = ViewState()
    st.session_state.advice = {}
    st.session_state.load_error = loaded.message


def set_view(view_state: ViewState):
    st.session_state.view_state = view_state


def sign_out(components: AppComponents):
    user = st.session_state.get("user")
    if user:
        run_async(components.audit_logger.log_user_signed_out(user.id))
    for key in ("user", "records", "view_state", "advice", "correlation_id", "load_error"):
        st.session_state.pop(key, None)
    st.logout()


# =============================================================================
# PAGES
# =============================================================================

def render_login_page():
    """Shown while no one is signed in."""
    st.title("💰 FinFamily")
    st.markdown("Gestão financeira da família: orçamento, viagens, investimentos e metas.")
    st.markdown("---")
    if st.button("🔐 Entrar", type="primary"):
        st.login()


def main():
    """Main application entry point."""
    components = get_components()
    # Script reruns don't share context variables with the cached factory
    configure_logging(get_settings().app)

    if not st.user.is_logged_in:
        render_login_page()
        return

    init_session(components, st.user.to_dict())
    user = st.session_state.get("user")
    if user is None:
        st.error("Não foi possível identificar sua conta. Entre novamente.")
        if st.button("Sair"):
            st.logout()
        return

    # Sidebar navigation
    st.sidebar.title("💰 FinFamily")
    st.sidebar.markdown(f"**{user.initial}** · {user.name}")
    if components.storage_backend == "memory":
        st.sidebar.caption("Modo offline: os dados não serão salvos.")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navegar para:",
        ["🏠 Painel", "⚙️ Configurações"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sair"):
        sign_out(components)
        return

    if st.session_state.load_error:
        st.warning(st.session_state.load_error)

    if page == "⚙️ Configurações":
        render_settings_page(components)
    elif st.session_state.view_state.on_dashboard:
        render_dashboard_page()
    else:
        render_module_page(components)


def render_dashboard_page():
    """Module cards, overall balance and recent activity."""
    user = st.session_state.user
    summary = build_dashboard(
        st.session_state.records,
        recent_limit=get_settings().app.recent_activity_limit,
    )

    st.title(f"Olá, {user.first_name} 👋")
    st.markdown("Aqui está o resumo das finanças da família.")

    columns = st.columns(len(summary.cards))
    for column, card in zip(columns, summary.cards):
        module = card.module
        with column:
            st.markdown(f"""
            <div class="module-card" style="background-color: {module.style.light_hex};
                 border-left: 5px solid {module.style.hex};">
                <h4>{module.icon.emoji} {module.title}</h4>
                <p>{module.description}</p>
                <div class="big-number">{format_money(card.total)}</div>
            </div>
            """, unsafe_allow_html=True)
            if st.button("Abrir", key=f"open_{module.id.value}"):
                set_view(st.session_state.view_state.select_module(module.id))
                st.rerun()

    st.markdown("---")
    col1, col2 = st.columns([1, 2])

    with col1:
        st.metric("Saldo geral", format_money(summary.balance))

    with col2:
        st.subheader("Atividade recente")
        if not summary.recent_activity:
            st.info("Nenhuma transação ainda. Abra um módulo para adicionar a primeira.")
        for record in summary.recent_activity:
            sign = "+" if record.kind == RecordKind.INCOME else "-"
            st.markdown(
                f"**{record.title}** · {format_date(record)} · "
                f"{KIND_LABELS[record.kind]} · {sign}{format_money(record.amount)}"
            )


def render_module_page(components: AppComponents):
    """One module, one month."""
    view_state = st.session_state.view_state
    view = build_module_month_view(
        view_state.active_module,
        view_state.month,
        st.session_state.records,
        gauge_target=get_settings().app.activity_gauge_target,
    )
    module = view.module

    if st.button("← Voltar ao painel"):
        set_view(view_state.back_to_dashboard())
        st.rerun()

    st.title(f"{module.icon.emoji} {module.title}")
    st.caption(module.description)

    # Month navigation
    col1, col2, col3 = st.columns([1, 3, 1])
    with col1:
        if st.button("◀", key="prev_month"):
            set_view(view_state.previous_month())
            st.rerun()
    with col2:
        st.markdown(f"### {view.month.label.capitalize()}")
    with col3:
        if st.button("▶", key="next_month"):
            set_view(view_state.next_month())
            st.rerun()

    # Monthly figures
    col1, col2, col3 = st.columns(3)
    col1.metric("Receitas", format_money(view.monthly_income))
    col2.metric("Despesas", format_money(view.monthly_expenses))
    col3.metric("Provisões", format_money(view.monthly_provisions))

    st.progress(
        int(view.activity_gauge),
        text=f"Atividade do mês: {len(view.items)} lançamentos",
    )

    if view.daily_series:
        st.bar_chart(
            [
                {"dia": int(point.day), "valor": float(point.value)}
                for point in view.daily_series
            ],
            x="dia",
            y="valor",
            color=module.style.hex,
        )

    st.markdown("---")

    if view_state.form_open:
        render_record_form(components)
    elif st.button("➕ Nova transação", type="primary"):
        set_view(view_state.open_form())
        st.rerun()

    st.subheader("Transações")
    if not view.items:
        st.info("Nenhuma transação neste mês.")
    for item in view.items:
        render_record_item(components, item)

    st.markdown("---")
    render_advice_panel(components)


def render_record_item(components: AppComponents, item: RecordProgress):
    record = item.record
    col1, col2, col3 = st.columns([6, 1, 1])

    with col1:
        st.markdown(
            f"**{record.title}** · {format_date(record)} · "
            f"{KIND_LABELS[record.kind]} · {format_money(record.amount)}"
        )
        match = item.match
        if match is not None:
            if record.module_id == ModuleId.PROJECTION:
                label = (
                    f"Realizado {format_money(match.current_total)} de "
                    f"{format_money(match.goal_amount)} ({match.raw_percentage}%)"
                )
            else:
                label = (
                    f"Meta {format_money(match.goal_amount)}: "
                    f"{match.raw_percentage}% utilizado"
                )
            st.progress(int(match.percentage), text=label)
            if match.is_over:
                st.warning(f"⚠️ Meta excedida em {format_money(match.excess)}")

    with col2:
        if st.button("✏️", key=f"edit_{record.id}", help="Editar"):
            set_view(st.session_state.view_state.open_form(editing=record))
            st.rerun()

    with col3:
        if st.button("🗑️", key=f"delete_{record.id}", help="Excluir"):
            change = run_async(components.record_flow.delete_record(
                st.session_state.user,
                record.id,
                st.session_state.records,
                correlation_id=st.session_state.correlation_id,
            ))
            if change.success:
                st.session_state.records = change.records
                st.rerun()
            else:
                st.error(change.message)


def render_record_form(components: AppComponents):
    """Create or edit form; nothing is saved until the store confirms."""
    view_state = st.session_state.view_state
    form = view_state.form
    editing = view_state.editing
    kinds = list(RecordKind)

    st.subheader("Editar transação" if editing else "Nova transação")

    with st.form("record_form"):
        title = st.text_input("Título *", value=form.title)
        amount = st.text_input("Valor *", value=form.amount, placeholder="1.234,56")
        kind = st.selectbox(
            "Tipo",
            options=kinds,
            index=kinds.index(form.kind),
            format_func=lambda k: KIND_LABELS[k],
        )
        record_date = st.text_input("Data (AAAA-MM-DD)", value=form.date)

        col1, col2 = st.columns(2)
        with col1:
            submitted = st.form_submit_button("💾 Salvar", type="primary")
        with col2:
            cancelled = st.form_submit_button("Cancelar")

    if cancelled:
        set_view(view_state.close_form())
        st.rerun()

    if not submitted:
        return

    updated = view_state.update_form(
        title=title,
        amount=amount,
        kind=kind,
        date=record_date,
    )
    next_state, submission = updated.submit_form()

    if submission is None:
        set_view(updated)
        st.warning("Preencha o título e o valor.")
        return

    if not submission.accepted:
        set_view(updated)
        for issue in submission.validation.issues:
            if issue.severity == "error":
                st.error(issue.message + (f" ({issue.suggested_fix})" if issue.suggested_fix else ""))
        return

    user = st.session_state.user
    if submission.edited is not None:
        change = run_async(components.record_flow.edit_record(
            user,
            submission.edited,
            st.session_state.records,
            correlation_id=st.session_state.correlation_id,
        ))
    else:
        change = run_async(components.record_flow.add_record(
            user,
            submission.draft,
            st.session_state.records,
            correlation_id=st.session_state.correlation_id,
        ))

    if not change.success:
        # Keep the form open with what the user typed
        set_view(updated)
        st.error(change.message)
        return

    for issue in submission.validation.warnings:
        st.toast(issue.message)

    st.session_state.records = change.records
    set_view(next_state)
    st.rerun()


def render_advice_panel(components: AppComponents):
    """AI analysis of the module's month."""
    view_state = st.session_state.view_state
    key = (view_state.active_module.value, view_state.month.year, view_state.month.month)

    st.subheader("🤖 Análise inteligente")

    if st.button("Analisar este mês"):
        with st.spinner("Analisando suas transações..."):
            st.session_state.advice[key] = run_async(
                components.advice_flow.request_advice(
                    st.session_state.user,
                    view_state.active_module,
                    view_state.month,
                    st.session_state.records,
                    correlation_id=st.session_state.correlation_id,
                )
            )

    advice = st.session_state.advice.get(key)
    if advice is None:
        return

    st.markdown(
        advice_html(advice, RISK_LABELS[advice.risk_level.value]),
        unsafe_allow_html=True,
    )


def render_settings_page(components: AppComponents):
    """Render the settings page."""
    st.title("⚙️ Configurações")

    st.markdown("### Status das conexões")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Armazenamento)", "google_sheets"),
        ("Gemini (IA)", "gemini"),
        ("Aplicação", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configurado")
        else:
            error = status.get(f"{key}_error", "Não configurado")
            st.error(f"❌ {name} - {error}")

    st.markdown(f"**Armazenamento em uso:** `{components.storage_backend}`")

    st.markdown("---")
    st.markdown("### Configuração")
    st.markdown(
        "Para configurar a aplicação, crie um arquivo `.env` com suas chaves. "
        "Veja `.env.example` para as variáveis necessárias. O login é "
        "configurado em `.streamlit/secrets.toml` (seção `[auth]`)."
    )


if __name__ == "__main__":
    main()
