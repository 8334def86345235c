"""
Bulk Graph - Streamlit Web App
==============================

Web interface for the recognition network: bind a handle, vote on other
members, browse the tiers and generate a passport card.

Run with:
    streamlit run bulkgraph/app.py
"""

import streamlit as st

from bulkgraph.engine import RecognitionEngine
from bulkgraph.fingerprint import DeviceEnvironment, device_fingerprint
from bulkgraph.models import Candidate, View, VoteValue
from bulkgraph.utils import LocalStorage, device_storage_path, node_card_html


# =============================================================================
# PAGE CONFIG
# =============================================================================
st.set_page_config(
    page_title="Bulk Graph",
    page_icon="🌐",
    layout="wide",
    initial_sidebar_state="expanded"
)

# =============================================================================
# CUSTOM CSS
# =============================================================================
st.markdown("""
<style>
    .main-header {
        font-size: 3rem;
        font-weight: 900;
        font-style: italic;
        color: #00f2ff;
        text-align: center;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        text-align: center;
        color: #888;
        letter-spacing: 0.3em;
        margin-bottom: 2rem;
    }
    .node-card {
        background: #0a0a0a;
        border-radius: 24px;
        padding: 1.5rem;
        margin-bottom: 1rem;
        border: 1px solid rgba(0, 242, 255, 0.3);
    }
    .node-name {
        font-size: 1.3rem;
        font-weight: 800;
        font-style: italic;
        color: #fff;
    }
    .node-handle {
        font-size: 0.8rem;
        color: #00f2ff;
        margin-bottom: 0.5rem;
    }
    .node-bio {
        font-size: 0.9rem;
        color: #a0a0a0;
        font-style: italic;
    }
    .stat-value {
        font-size: 2.5rem;
        font-weight: 900;
        color: #00f2ff;
    }
</style>
""", unsafe_allow_html=True)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_engine() -> RecognitionEngine:
    """Get or create the engine for this browser session."""
    if "engine" not in st.session_state:
        user_agent = st.context.headers.get("User-Agent", "")
        environment = DeviceEnvironment.detect(user_agent)
        storage = LocalStorage(device_storage_path(device_fingerprint(environment)))
        engine = RecognitionEngine(storage=storage, environment=environment)
        engine.start()
        st.session_state["engine"] = engine
    return st.session_state["engine"]


def card_bio(engine: RecognitionEngine, candidate: Candidate) -> str:
    """Bio for a voting card, generated once per member."""
    bios = st.session_state.setdefault("bios", {})
    if candidate.id not in bios:
        bios[candidate.id] = engine.target_bio(candidate)
    return bios[candidate.id]


def render_node_card(candidate: Candidate, bio: str = ""):
    """Render a member as a card."""
    st.markdown(
        node_card_html(
            candidate.name,
            candidate.handle,
            candidate.trust_score,
            candidate.profile_image_url,
            bio,
        ),
        unsafe_allow_html=True,
    )


# =============================================================================
# SCREENS
# =============================================================================

def render_landing(engine: RecognitionEngine):
    st.markdown('<h1 class="main-header">SOCIAL GRAPH.</h1>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">ONE DEVICE, ONE NODE</p>', unsafe_allow_html=True)
    if st.button("Establish Node", type="primary", use_container_width=True):
        engine.navigate(View.LOGIN)
        st.rerun()


def render_login(engine: RecognitionEngine):
    st.markdown("### 🔗 Identity Binding")
    handle = st.text_input("Handle", placeholder="@handle")

    if st.button("Link Identity", type="primary", use_container_width=True):
        with st.spinner("Verifying..."):
            result = engine.login(handle)
        if result.success:
            st.success(result.message)
            st.rerun()
        else:
            st.error(result.message)


def render_dashboard(engine: RecognitionEngine):
    node = engine.my_node()
    session = engine.session

    col1, col2 = st.columns([2, 1])

    with col1:
        if node:
            st.image(node.profile_image_url, width=96)
        st.header(node.name if node else session.current_user, anchor=False)
        st.caption("Verified Network Participant")
        st.info(st.session_state.get("analysis") or
                "Protocol synced. Analyze your node to generate a social passport.")

        b1, b2 = st.columns(2)
        with b1:
            if st.button("Rice Voting", type="primary", use_container_width=True):
                engine.navigate(View.VOTING)
                st.rerun()
        with b2:
            if st.button("Digital Passport", use_container_width=True):
                with st.spinner("Mapping..."):
                    passport = engine.passport()
                st.session_state["analysis"] = passport.analysis
                st.session_state["passport"] = passport
                st.rerun()

    with col2:
        st.markdown("Identity Weight")
        st.markdown(f'<div class="stat-value">{int(node.trust_score) if node else 0}</div>', unsafe_allow_html=True)
        st.metric("Votes used", f"{session.votes_today}/{session.max_votes}")

    passport = st.session_state.get("passport")
    if passport:
        render_passport(passport)


def render_passport(passport):
    st.markdown("---")
    st.subheader("🪪 Digital Node")
    col1, col2 = st.columns([1, 3])
    with col1:
        st.image(passport.avatar_url, width=144)
    with col2:
        st.markdown(f"### {passport.name}")
        st.caption(passport.handle)
        st.markdown(f"*\"{passport.analysis}\"*")
        rank = f" · Rank #{passport.rank}" if passport.rank else ""
        st.markdown(f"**Trust Index: {passport.trust_score}**{rank}")
        st.link_button("Share on X", passport.share_url)


def render_voting(engine: RecognitionEngine):
    # Keep the queue the card was drawn from so the vote lands on it
    if "queue" not in st.session_state:
        st.session_state["queue"] = engine.voting_queue()
    queue = st.session_state["queue"]

    if not queue:
        st.markdown("### Queue Mapped")
        st.caption("No more nodes in immediate range")
        if st.button("Return Home"):
            st.session_state.pop("queue", None)
            engine.navigate(View.DASHBOARD)
            st.rerun()
        return

    target = queue[0]
    disabled = engine.session.limit_reached
    render_node_card(target, card_bio(engine, target))

    col1, col2 = st.columns(2)
    value = None
    with col1:
        if st.button("Skip", disabled=disabled, use_container_width=True):
            value = VoteValue.SKIP
    with col2:
        if st.button("Recognize", type="primary", disabled=disabled, use_container_width=True):
            value = VoteValue.RECOGNIZE

    if value is not None:
        outcome = engine.vote(value, queue=queue)
        st.session_state.pop("queue", None)
        if outcome.trust_synced is False:
            st.toast("Vote saved locally; trust score will sync later.")
        st.rerun()


def render_leaderboard(engine: RecognitionEngine):
    st.markdown("## Lily Index")
    query = st.text_input("Filter nodes", placeholder="FILTER NODES...")
    tiers = engine.leaderboard(query)

    st.markdown("#### 💎 Diamond Tier")
    cols = st.columns(3)
    for col, candidate in zip(cols, tiers.diamond):
        with col:
            render_node_card(candidate)

    st.markdown("#### 🥇 Gold Tier")
    cols = st.columns(5)
    for i, candidate in enumerate(tiers.gold):
        with cols[i % 5]:
            st.image(candidate.profile_image_url, width=40)
            st.caption(f"{candidate.name} · {candidate.trust_score}")

    if tiers.silver:
        st.markdown("#### 🥈 Silver Tier")
        st.dataframe(
            [{"name": c.name, "handle": c.handle, "trust": c.trust_score} for c in tiers.silver],
            use_container_width=True,
        )


# =============================================================================
# MAIN APP
# =============================================================================

def main():
    """Main Streamlit app."""
    engine = get_engine()
    session = engine.session

    with st.sidebar:
        st.header("🌐 Bulk.")
        if session.is_logged_in:
            st.caption(f"Logged in as {session.current_user}")
            for label, view in (
                ("🏠 Dashboard", View.DASHBOARD),
                ("🗳️ Recognition", View.VOTING),
                ("🏆 Classification", View.LEADERBOARD),
            ):
                if st.button(label, use_container_width=True):
                    engine.navigate(view)
                    st.rerun()

            st.markdown("---")
            summary = engine.summary()
            st.metric("Nodes", summary.count)
            st.metric("Avg. trust", f"{summary.mean_trust:.1f}")

        if engine.directory.from_fallback:
            st.warning("Candidate store unreachable; showing sample nodes.")

    screens = {
        View.LANDING: render_landing,
        View.LOGIN: render_login,
        View.DASHBOARD: render_dashboard,
        View.VOTING: render_voting,
        View.LEADERBOARD: render_leaderboard,
    }
    try:
        screens[engine.view](engine)
    except Exception as e:
        st.error(f"❌ Error: {str(e)}")


if __name__ == "__main__":
    main()
