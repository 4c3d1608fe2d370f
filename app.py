"""
app.py
Streamlit gym member card: public scan page + owner console.
Run: streamlit run app.py
Scan link: /?member=<id>   (QR codes point at /?member=<id>&scanned=1)
"""

from __future__ import annotations

import logging

import streamlit as st

import auth
import utils
from config import Settings, load_settings
from db import GymStore
from errors import MemberNotFound
from ethiopian import today_ethiopian
from membership import SystemClock, load_card_view
from models import PLAN_CHOICES, CardView, MemberRecord

st.set_page_config(page_title="Gym Member Card", layout="wide")

log = logging.getLogger("gym_card")
clock = SystemClock()


@st.cache_resource
def get_settings() -> Settings:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return settings


@st.cache_resource
def get_store() -> GymStore:
    settings = get_settings()
    store = GymStore(settings.db_path)
    # Initialize DB + default admin if needed
    store.init_db(auth.hash_password("admin123"))
    log.info("Using member store at %s", settings.db_path)
    return store


# ---------- Public scan page ----------

def card_qr_url(view: CardView, settings: Settings) -> str:
    # the QR always opens the scanned view
    link = utils.scan_url(settings.base_url, view.member_id, scanned=True)
    return utils.qr_image_url(settings.qr_service_url, link, settings.qr_size)


def render_card(view: CardView, settings: Settings):
    qr = card_qr_url(view, settings)

    with st.container(border=True):
        st.markdown(f"### {settings.gym_name}")
        c1, c2, c3 = st.columns([1, 2, 1])
        with c1:
            st.image(view.photo_url, width=120)
        with c2:
            st.markdown(f"**{view.full_name}**")
            st.write(f"Status: **{view.status}**")
            st.write(f"Plan: **{view.plan}**")
            st.write(f"Price: **{view.price}**")
            st.write(f"Registered: **{view.register_date}**")
        with c3:
            st.image(qr, width=160)

        if view.is_active:
            st.success(view.footer_text)
        else:
            st.error(view.footer_text)


def scan_page(member_id: str, scanned: bool):
    settings = get_settings()
    store = get_store()

    try:
        view = load_card_view(
            store,
            member_id,
            clock,
            scanned=scanned,
            placeholder_photo_url=settings.photo_placeholder_url,
        )
    except MemberNotFound:
        st.title("Member Not Found")
        st.write("No member found with this ID.")
        return

    st.title("Member Details" if scanned else "Member Card Preview")
    render_card(view, settings)

    if scanned:
        c1, c2 = st.columns(2)
        c1.metric("Remaining (on record)", "N/A" if view.primary_remaining is None else view.primary_remaining)
        c2.metric("Days left (today)", "N/A" if view.remaining_days is None else view.remaining_days)
    else:
        st.download_button(
            "Download printable card",
            data=utils.card_html(view, settings.gym_name, card_qr_url(view, settings)),
            file_name=f"member-card-{view.member_id}.html",
            mime="text/html",
        )
        st.caption("Open the downloaded card and print it: the page is sized for a 3.375in x 2.125in PVC card.")


# ---------- Owner console ----------

def require_login():
    if "logged_in" not in st.session_state:
        st.session_state.logged_in = False
    if "username" not in st.session_state:
        st.session_state.username = None


def logout():
    st.session_state.logged_in = False
    st.session_state.username = None
    st.success("Logged out.")


def login_screen():
    st.title("🔐 Gym Owner Login")

    col1, col2 = st.columns([1, 1])
    with col1:
        username = st.text_input("Username", value="admin")
        password = st.text_input("Password", type="password")
        if st.button("Login", type="primary"):
            if auth.login(get_store(), username.strip(), password):
                st.session_state.logged_in = True
                st.session_state.username = username.strip()
                st.rerun()
            else:
                st.error("Invalid username or password.")

    with col2:
        st.info(
            "First run creates a default admin:\n\n"
            "- username: **admin**\n"
            "- password: **admin123**\n\n"
            "You will be forced to change it on first login."
        )


def password_form() -> bool:
    new1 = st.text_input("New password", type="password")
    new2 = st.text_input("Confirm new password", type="password")
    if st.button("Update password", type="primary"):
        if len(new1) < 6:
            st.error("Password must be at least 6 characters.")
        elif new1 != new2:
            st.error("Passwords do not match.")
        else:
            auth.change_password(get_store(), st.session_state.username, new1)
            st.success("Password updated.")
            return True
    return False


def force_change_password_screen():
    st.title("⚠️ Change Password (Required)")
    st.warning("You must change the default password before using the app.")
    if password_form():
        st.rerun()


def member_form(existing: MemberRecord | None = None):
    store = get_store()
    if existing:
        st.subheader(f"✏️ Edit Member (ID: {existing.member_id})")
    else:
        st.subheader("➕ Add Member")

    col1, col2, col3 = st.columns(3)
    with col1:
        first_name = st.text_input("First name", value=(existing.first_name or "") if existing else "")
        last_name = st.text_input("Last name", value=(existing.last_name or "") if existing else "")
        photo = st.text_input("Photo URL (optional)", value=(existing.profile_image_url or "") if existing else "")

    with col2:
        plan_options = list(PLAN_CHOICES)
        if existing and existing.duration and existing.duration not in plan_options:
            plan_options.append(existing.duration)
        duration = st.selectbox(
            "Plan",
            options=plan_options,
            index=plan_options.index(existing.duration) if existing and existing.duration else 0,
        )
        price = st.text_input("Price", value=(existing.price or "") if existing else "1500")

    with col3:
        register_date = st.text_input(
            "Register date (Ethiopian, YYYY-MM-DD)",
            value=(existing.register_date or "") if existing else today_ethiopian(clock),
        )
        status = st.text_input("Status", value=(existing.status or "ACTIVE") if existing else "ACTIVE")

    errors = utils.validate_member_inputs(first_name, duration, price, register_date)
    for e in errors:
        st.error(e)

    if st.button("Save", type="primary", disabled=bool(errors)):
        record = MemberRecord(
            member_id=existing.member_id if existing else "",
            first_name=first_name.strip(),
            last_name=last_name.strip() or None,
            status=status.strip() or None,
            duration=duration,
            price=price.strip() or None,
            profile_image_url=photo.strip() or None,
            register_date=register_date.strip(),
            remaining=existing.remaining if existing else None,
        )
        if existing:
            store.update_member(record)
            st.success("Member updated.")
        else:
            member_id = store.add_member(record)
            st.success(f"Member added (ID: {member_id}).")
        st.rerun()


def members_page():
    st.header("👥 Members")
    store = get_store()
    settings = get_settings()

    with st.sidebar:
        st.subheader("Search")
        search = st.text_input("Search (name/ID)")

    members = store.list_members(search=search)
    df = utils.roster_dataframe(members, clock, settings.base_url)
    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={"scan_link": st.column_config.LinkColumn("Scan link")},
    )

    st.divider()

    colA, colB = st.columns([1, 2])
    with colA:
        st.subheader("Select member")
        selected_id = st.selectbox("Member ID", options=["(none)"] + [m.member_id for m in members])

    with colB:
        if selected_id != "(none)":
            st.subheader("Member actions")
            st.markdown(f"[Open card]({utils.scan_url(settings.base_url, selected_id)})")
            c1, c2 = st.columns(2)
            with c1:
                if st.button("Edit"):
                    st.session_state.edit_member_id = selected_id
                    st.rerun()
            with c2:
                delete_confirm = st.checkbox("Confirm delete", value=False, key="del_confirm")
                if st.button("Delete", type="secondary", disabled=not delete_confirm):
                    store.delete_member(selected_id)
                    st.success("Member deleted.")
                    st.rerun()

    st.divider()

    if st.session_state.get("edit_member_id"):
        existing = store.fetch_member(st.session_state.edit_member_id)
        if existing:
            member_form(existing=existing)
        if st.button("Cancel edit"):
            st.session_state.edit_member_id = None
            st.rerun()
    else:
        member_form(existing=None)


def reports_page():
    st.header("🧾 Reports")
    store = get_store()
    settings = get_settings()

    st.subheader("Export members to CSV")
    members = store.list_members()
    if members:
        st.download_button(
            "Download members.csv",
            data=utils.members_to_csv_bytes(members, clock, settings.base_url),
            file_name="members.csv",
            mime="text/csv",
        )
    else:
        st.caption("No members to export.")

    st.divider()

    st.subheader("Cached remaining days")
    st.caption("Overwrite every member's stored 'remaining' figure with today's computed value.")
    if st.button("Refresh cached remaining"):
        count = utils.refresh_cached_remaining(store, clock)
        st.success(f"Refreshed {count} member(s).")


def settings_page():
    st.header("⚙️ Settings")

    st.subheader("Change password")
    password_form()

    st.divider()

    st.subheader("Sample data")
    st.caption("Insert 3 sample members for testing (adds new rows each run).")
    if st.button("Insert sample data"):
        utils.insert_sample_data(get_store(), clock)
        st.success("Sample data inserted.")
        st.rerun()


def main_app():
    st.sidebar.title("🏋️ Gym Cards")
    st.sidebar.caption(f"Logged in as: {st.session_state.username}")
    st.sidebar.caption(f"Today (Ethiopian): {today_ethiopian(clock)}")

    pages = ["Members", "Reports", "Settings"]
    if "page" not in st.session_state:
        st.session_state.page = "Members"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    if st.session_state.page == "Members":
        members_page()
    elif st.session_state.page == "Reports":
        reports_page()
    elif st.session_state.page == "Settings":
        settings_page()


# --------- App entry ---------

def run():
    get_settings()
    store = get_store()

    member_id = st.query_params.get("member")
    if member_id:
        scan_page(member_id, scanned=st.query_params.get("scanned") == "1")
        return

    require_login()

    if not st.session_state.logged_in:
        login_screen()
        return

    # Force password change on first login after DB creation
    if store.is_force_password_change():
        force_change_password_screen()
        return

    main_app()


if __name__ == "__main__":
    run()
