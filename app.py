"""
app.py
Streamlit member settings (profile, complaints, payments).
Run: streamlit run app.py
"""

from __future__ import annotations

import logging
import os

import pandas as pd
import streamlit as st

import auth
import db
import member_complaints
import member_payments
import member_profile
import utils
from member_complaints import ComplaintForm
from member_profile import ProfileState
from models import COMPLAINT_CATEGORIES, COMPLAINT_PRIORITIES, STATUS_FILTERS, Complaint, CurrentUser

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

st.set_page_config(page_title="Member Settings", layout="wide")

SCREEN_KEYS = ("profile_state", "complaints", "payments_overview")


def init_once():
    db.init_db()


def reset_screens():
    for key in SCREEN_KEYS:
        st.session_state.pop(key, None)


def logout():
    auth.sign_out(st.session_state)
    reset_screens()
    st.success("Logged out.")


def login_screen():
    st.title("🏋️ Member Sign In")

    col1, col2 = st.columns([1, 1])
    with col1:
        username = st.text_input("Username", value="demo")
        if st.button("Sign in", type="primary"):
            if auth.sign_in(st.session_state, username):
                reset_screens()
                st.rerun()
            else:
                st.error("No member found with that username.")

    with col2:
        st.info("Load a demo member (username **demo**) with complaints and payments to try the screens.")
        if st.button("Insert sample data"):
            utils.insert_sample_data()
            st.success("Sample data inserted.")


# ---------- Profile ----------

def _text_or(value, fallback="Not set"):
    return value if value not in (None, "") else fallback


def profile_view(member):
    st.subheader("Personal information")
    c1, c2, c3 = st.columns(3)
    c1.write(f"**Name:** {_text_or(member.name)}")
    c1.write(f"**Age:** {f'{member.age} years' if member.age else 'Not set'}")
    c2.write(f"**Mobile:** {_text_or(member.mobile)}")
    c2.write(f"**WhatsApp:** {_text_or(member.whatsapp)}")
    c3.write(f"**Email:** {_text_or(member.email)}")
    c3.write(f"**Username:** {_text_or(member.username)}")

    st.subheader("Physical stats")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Weight", f"{member.weight:g} kg" if member.weight else "N/A")
    c2.metric("Height", f"{member.height:g} cm" if member.height else "N/A")
    c3.metric("BMI", _text_or(member.bmi, "N/A"))
    c4.metric("Category", _text_or(member.bmi_category, "N/A"))

    st.subheader("Medical information")
    c1, c2 = st.columns(2)
    c1.write(f"**Allergies:** {_text_or(member.allergies, 'None reported')}")
    c2.write(f"**Medical conditions:** {_text_or(member.diseases, 'None reported')}")

    st.subheader("Emergency contact")
    c1, c2 = st.columns(2)
    c1.write(f"**Name:** {_text_or(member.emergency_name)}")
    c2.write(f"**Phone:** {_text_or(member.emergency_contact)}")


def profile_form(state: ProfileState) -> ProfileState:
    draft = state.draft

    st.subheader("Personal information")
    c1, c2, c3 = st.columns(3)
    with c1:
        name = st.text_input("Full name", value=draft.name, key="profile_name")
        age = st.number_input("Age", min_value=0, max_value=120, value=utils.clamp(draft.age, 0, 120), step=1, key="profile_age")
    with c2:
        mobile = st.text_input("Mobile", value=draft.mobile, key="profile_mobile")
        whatsapp = st.text_input("WhatsApp", value=draft.whatsapp, key="profile_whatsapp")
    with c3:
        email = st.text_input("Email", value=draft.email, key="profile_email")

    st.subheader("Physical stats")
    c1, c2, c3 = st.columns(3)
    with c1:
        weight = st.number_input("Weight (kg)", min_value=0.0, value=utils.clamp(draft.weight, 0.0), step=0.1, key="profile_weight")
    with c2:
        height = st.number_input("Height (cm)", min_value=0.0, value=utils.clamp(draft.height, 0.0), step=0.1, key="profile_height")

    state = state.update_draft(
        name=name,
        age=int(age) if age is not None else None,
        mobile=mobile,
        whatsapp=whatsapp,
        email=email,
        weight=weight,
        height=height,
    )

    with c3:
        info = state.draft.bmi
        if info:
            st.metric("BMI", info.bmi, info.category, delta_color="off")
        else:
            st.caption("Enter weight and height to calculate BMI.")
    if weight is not None and height is not None:
        for warning in utils.validate_bmi_inputs(weight, height):
            st.warning(warning)

    st.subheader("Medical information")
    c1, c2 = st.columns(2)
    with c1:
        allergies = st.text_area("Allergies", value=draft.allergies, key="profile_allergies")
    with c2:
        diseases = st.text_area("Medical conditions", value=draft.diseases, key="profile_diseases")

    st.subheader("Emergency contact")
    c1, c2 = st.columns(2)
    with c1:
        emergency_name = st.text_input("Contact name", value=draft.emergency_name, key="profile_emergency_name")
    with c2:
        emergency_contact = st.text_input(
            "Contact phone", value=draft.emergency_contact, key="profile_emergency_contact"
        )

    return state.update_draft(
        allergies=allergies,
        diseases=diseases,
        emergency_name=emergency_name,
        emergency_contact=emergency_contact,
    )


def profile_page(user: CurrentUser):
    st.header("👤 Profile")

    if "profile_state" not in st.session_state:
        with st.spinner("Loading profile..."):
            member = member_profile.load_member(user.id)
        st.session_state.profile_state = ProfileState.from_member(member) if member else None

    state = st.session_state.profile_state
    if state is None:
        st.caption("Profile could not be loaded.")
        return

    if state.show_success():
        st.success("Profile updated successfully!")

    member = state.snapshot
    c1, c2, c3 = st.columns(3)
    c1.metric("Account status", "Active" if member.is_active else "Inactive")
    c2.metric("Level", member.level.capitalize())
    c3.metric("Member since", utils.format_timestamp(member.join_date))

    st.divider()

    if not state.editing:
        if st.button("✏️ Edit Profile"):
            st.session_state.profile_state = state.begin_edit()
            st.rerun()
        profile_view(member)
        return

    state = profile_form(state)
    st.session_state.profile_state = state

    col1, col2, _ = st.columns([1, 1, 4])
    with col1:
        save = st.button("Save changes", type="primary", disabled=not state.is_dirty)
    with col2:
        cancel = st.button("Cancel")

    if cancel:
        st.session_state.profile_state = state.revert()
        st.rerun()

    if save:
        try:
            with st.spinner("Saving..."):
                saved = member_profile.save_profile(state)
        except Exception:
            logger.exception("Error updating profile for %s", user.id)
            st.error("Failed to update profile. Please try again.")
        else:
            st.session_state.profile_state = saved
            st.rerun()


# ---------- Complaints ----------

@st.dialog("Submit a complaint")
def new_complaint_dialog(user: CurrentUser):
    subject = st.text_input("Subject")
    c1, c2 = st.columns(2)
    with c1:
        category = st.selectbox("Category", COMPLAINT_CATEGORIES)
    with c2:
        priority = st.selectbox("Priority", COMPLAINT_PRIORITIES, index=COMPLAINT_PRIORITIES.index("Medium"))
    description = st.text_area("Description")
    is_anonymous = st.checkbox("Submit anonymously", value=False)

    if st.button("Submit", type="primary"):
        form = ComplaintForm(
            subject=subject,
            category=category,
            priority=priority,
            description=description,
            is_anonymous=is_anonymous,
        )
        errors = form.validate()
        if errors:
            for e in errors:
                st.error(e)
            return
        try:
            member_complaints.submit_complaint(form, user)
        except Exception:
            logger.exception("Error submitting complaint for %s", user.id)
            st.error("Failed to submit complaint. Please try again.")
            return
        st.session_state.complaints.reload()
        st.rerun()


@st.dialog("Complaint details", width="large")
def complaint_details_dialog(complaint: Complaint):
    st.subheader(complaint.subject)
    c1, c2, c3 = st.columns(3)
    c1.write(f"**Status:** {complaint.status}")
    c2.write(f"**Category:** {complaint.category}")
    c3.write(f"**Priority:** {complaint.priority}")
    st.caption(
        f"Submitted by {complaint.member_name or 'N/A'} on "
        f"{utils.format_timestamp(complaint.created_at, with_time=True)}"
    )
    st.write(complaint.description)

    if complaint.responses:
        st.divider()
        st.write(f"**Admin responses ({len(complaint.responses)})**")
        for response in complaint.responses:
            with st.container(border=True):
                st.caption(
                    f"{response.admin_name} · {utils.format_timestamp(response.responded_at, with_time=True)}"
                )
                st.write(response.message)
    else:
        st.caption("No responses yet.")


def complaints_page(user: CurrentUser):
    st.header("📝 Complaints")

    if "complaints" not in st.session_state:
        st.session_state.complaints = member_complaints.complaints_loader(user.id)
    loaded = st.session_state.complaints
    with st.spinner("Loading complaints..."):
        loaded.ensure_loaded()

    counts = member_complaints.status_counts(loaded.items)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Total", len(loaded))
    c2.metric("Pending", counts["Pending"])
    c3.metric("In progress", counts["In Progress"])
    c4.metric("Resolved", counts["Resolved"])

    col1, col2 = st.columns([1, 3])
    with col1:
        status = st.selectbox(
            "Status",
            STATUS_FILTERS,
            format_func=lambda s: "All statuses" if s == "all" else s,
        )
    with col2:
        st.write("")
        if st.button("➕ New complaint", type="primary"):
            new_complaint_dialog(user)

    st.divider()

    rows = loaded.filter(member_complaints.status_predicate(status))
    if not rows:
        st.caption("No complaints to show.")
        return

    for complaint in rows:
        with st.container(border=True):
            c1, c2 = st.columns([4, 1])
            with c1:
                st.write(f"**{complaint.subject}**")
                st.caption(
                    f"{complaint.status} · {complaint.priority} · {complaint.category} · "
                    f"{utils.format_timestamp(complaint.created_at)}"
                )
                if complaint.responses:
                    st.caption(f"💬 {len(complaint.responses)} response(s)")
            with c2:
                if st.button("View", key=f"view_{complaint.id}"):
                    complaint_details_dialog(complaint)


# ---------- Payments ----------

def payments_page(user: CurrentUser):
    st.header("💳 Payments")

    if "payments_overview" not in st.session_state:
        with st.spinner("Loading payments..."):
            st.session_state.payments_overview = member_payments.load_payment_overview(user.id)
    overview = st.session_state.payments_overview
    payments = overview.payments.items

    month = member_payments.current_month()
    if member_payments.is_month_paid(payments, month):
        st.success(f"✅ {utils.format_month(month)} is paid.")
    else:
        st.warning(f"⚠️ No payment recorded for {utils.format_month(month)}.")

    count, total = member_payments.payment_totals(payments)
    c1, c2, c3 = st.columns(3)
    c1.metric("Total payments", count)
    c2.metric("Total amount", f"{total:.2f}")
    c3.metric("Membership", "Active" if overview.member and overview.member.is_active else "Inactive")

    st.divider()

    st.subheader("Payment history")
    years = member_payments.available_years(payments)
    year = st.selectbox("Year", ["all"] + years, format_func=lambda y: "All years" if y == "all" else y)
    rows = overview.payments.filter(member_payments.year_predicate(year))

    if not rows:
        st.caption("No payments recorded yet.")
        return

    df = pd.DataFrame(
        [
            {
                "Month": utils.format_month(p.month),
                "Amount": p.amount or 0,
                "Method": p.payment_method,
                "Paid at": utils.format_timestamp(p.paid_at, with_time=True),
                "Recorded by": p.recorded_by or "",
                "Notes": p.notes or "",
            }
            for p in rows
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)
    st.download_button(
        "Download payments.csv",
        data=utils.payments_to_csv_bytes(rows),
        file_name="payments.csv",
        mime="text/csv",
    )


def main_app(user: CurrentUser):
    st.sidebar.title("⚙️ Settings")
    st.sidebar.caption(f"Signed in as: {user.name}")

    pages = ["Profile", "Complaints", "Payments"]
    if "page" not in st.session_state:
        st.session_state.page = "Profile"
    st.session_state.page = st.sidebar.radio("Navigate", pages, index=pages.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    if st.session_state.page == "Profile":
        profile_page(user)
    elif st.session_state.page == "Complaints":
        complaints_page(user)
    elif st.session_state.page == "Payments":
        payments_page(user)


# --------- App entry ---------

def run():
    init_once()

    user = auth.current_user(st.session_state)
    if user is None:
        login_screen()
        return

    main_app(user)


if __name__ == "__main__":
    run()
