from __future__ import annotations

import logging
import time

import altair as alt
import pandas as pd
import streamlit as st

from medimate import dashboard
from medimate.activities import engine as activities
from medimate.app_services import (
    FEEDBACK_CATEGORIES,
    FeedbackError,
    build_store,
    load_settings,
    validate_signup,
)
from medimate.reports import engine as reports
from medimate.skin import engine as skin
from medimate.symptoms import engine as symptoms


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("medimate.app")


def _label_with_unit(label, unit):
    return f"{label} ({unit})" if unit else label


def _to_widget_key(name: str) -> str:
    return f"input_{name}"


def _render_input(item):
    field_type = item.get("type")
    label = _label_with_unit(item.get("label", ""), item.get("unit", ""))
    help_text = item.get("help", "")
    widget_key = _to_widget_key(item.get("name", "field"))
    options = item.get("options", [])

    if field_type == "slider":
        if widget_key not in st.session_state:
            st.session_state[widget_key] = item.get("default", item.get("min", 0))
        return st.slider(
            label,
            min_value=item.get("min", 0),
            max_value=item.get("max", 10),
            step=item.get("step", 1),
            key=widget_key,
            help=help_text,
        )

    if field_type == "selectbox":
        return st.selectbox(label, options, key=widget_key, help=help_text)

    if field_type == "radio":
        return st.radio(label, options, index=None, key=widget_key, help=help_text)

    if field_type == "multiselect":
        return st.multiselect(label, options, key=widget_key, help=help_text)

    if field_type == "select_slider":
        if widget_key not in st.session_state:
            st.session_state[widget_key] = options[len(options) // 2]
        return st.select_slider(label, options=options, key=widget_key, help=help_text)

    st.warning(f"Unsupported input type: {field_type}")
    return None


def _simulate_latency(settings, feature: str, message: str) -> None:
    with st.spinner(message):
        time.sleep(float(settings["simulated_latency"].get(feature, 0.0)))


def _get_store():
    if "store" not in st.session_state:
        settings = load_settings()
        store = build_store(settings)
        store.ensure_demo_account()
        st.session_state["settings"] = settings
        st.session_state["store"] = store
    return st.session_state["store"], st.session_state["settings"]


def _severity_chart(profile, severity):
    df = pd.DataFrame(
        [{"Band": band, "Membership": profile.get(band, 0.0)} for band in symptoms.BANDS]
    )
    return (
        alt.Chart(df)
        .mark_bar(cornerRadiusEnd=4)
        .encode(
            x=alt.X("Band:N", sort=symptoms.BANDS, title=f"Severity {severity} across bands"),
            y=alt.Y("Membership:Q", scale=alt.Scale(domain=[0, 1])),
            color=alt.Color("Band:N", legend=None),
        )
    )


# ---------- pages ----------
def _render_home():
    st.markdown("### Your personal health companion")
    st.write(
        "Check symptoms, review a sample lab report, build a skincare routine, "
        "test your health knowledge and track everything on your dashboard."
    )
    st.info(f"**Tip of the day:** {activities.daily_tip()}")
    st.caption("MediMate gives general information only and is not a substitute for professional medical advice.")


def _render_quickcheck(store, settings):
    st.header("Symptom Quick Check")
    input_schema = symptoms.get_inputs()

    col1, col2 = st.columns(2)
    selected = []
    user_inputs = {}
    for idx, item in enumerate(input_schema):
        with col1 if idx % 2 == 0 else col2:
            value = _render_input(item)
        if item["name"].startswith("symptoms_"):
            selected.extend(value or [])
        else:
            user_inputs[item["name"]] = value

    custom = st.text_input("Other symptom (optional)", key="custom_symptom").strip()
    if custom and custom not in selected:
        selected.append(custom)
    user_inputs["symptoms"] = selected

    if st.button("Analyze Symptoms", type="primary", use_container_width=True):
        if not selected:
            st.error("Select at least one symptom to analyze.")
        else:
            _simulate_latency(settings, "symptoms", "Analyzing your symptoms...")
            result = symptoms.run_inference(user_inputs)
            st.session_state["symptom_result"] = (user_inputs, result)
            if store.user:
                store.append_symptom(symptoms.build_record(user_inputs, result))

    if "symptom_result" not in st.session_state:
        return
    user_inputs, result = st.session_state["symptom_result"]

    m1, m2, m3 = st.columns(3)
    m1.metric("Possible condition", result["condition"])
    m2.metric("Priority", result["severity"])
    m3.metric("Confidence", f"{result['confidence']}%")
    if result["severity"] == "Critical":
        st.error(result["recommendations"][0])
    st.write(result["description"])

    rec_col, test_col = st.columns(2)
    with rec_col:
        st.markdown("#### Recommendations")
        for item in result["recommendations"]:
            st.write(f"- {item}")
        st.markdown("#### Lifestyle")
        for item in result["lifestyle"]:
            st.write(f"- {item}")
    with test_col:
        st.markdown("#### Suggested tests")
        if result["suggested_tests"]:
            for item in result["suggested_tests"]:
                st.write(f"- {item}")
        else:
            st.caption("No specific tests suggested.")

    with st.expander("How was this decided?"):
        st.dataframe(pd.DataFrame(result["rule_trace"]), use_container_width=True)
        st.altair_chart(
            _severity_chart(result["severity_profile"], user_inputs["severity"]),
            use_container_width=True,
        )
    if not store.user:
        st.caption("Sign in to keep this check in your history.")


def _render_report_scanner(store, settings):
    st.header("Report Scanner")
    st.warning("Demo analyzer: the findings below are sample values and do not come from your file.")
    item = reports.get_inputs()[0]
    uploaded = st.file_uploader(item["label"], type=item["options"], help=item["help"])
    if uploaded is None:
        return

    try:
        reports.validate_upload(uploaded.name, uploaded.type, uploaded.size)
    except reports.UploadRejected as exc:
        logger.info("Rejected upload %s (%s, %d bytes)", uploaded.name, uploaded.type, uploaded.size)
        st.error(str(exc))
        return

    fingerprint = reports.upload_fingerprint(uploaded.name, uploaded.getvalue())
    if st.session_state.get("report_fingerprint") != fingerprint:
        _simulate_latency(settings, "reports", "Scanning your report...")
        result = reports.run_inference(uploaded.name)
        st.session_state["report_fingerprint"] = fingerprint
        st.session_state["report_result"] = result
        if store.user:
            store.append_report(reports.build_record(uploaded.name, result))

    result = st.session_state["report_result"]
    st.subheader(f"{result['test_type']} · {result['file_name']}")
    findings = pd.DataFrame(result["key_findings"]).rename(
        columns={
            "parameter": "Parameter",
            "value": "Value",
            "unit": "Unit",
            "normal_range": "Normal range",
            "status": "Status",
            "explanation": "Explanation",
        }
    )
    st.dataframe(findings, use_container_width=True)
    st.info(result["overall_assessment"])
    col1, col2 = st.columns(2)
    with col1:
        st.markdown("#### Recommendations")
        for rec in result["recommendations"]:
            st.write(f"- {rec}")
    with col2:
        st.markdown("#### Suggested tests")
        for test in result["suggested_tests"]:
            st.write(f"- {test}")
        st.markdown("#### Risk factors")
        for factor in result["risk_factors"]:
            st.write(f"- {factor}")


def _render_skin_analysis(store, settings):
    st.header("Skin Analysis")
    input_schema = skin.get_inputs()

    with st.form("skin_survey"):
        answers = {}
        for item in input_schema:
            answers[item["question_id"]] = _render_input(item)
        submitted = st.form_submit_button("Get my routine", type="primary")

    if submitted:
        missing = [qid for qid, value in answers.items() if value in (None, [])]
        # Concerns may legitimately be empty.
        missing = [qid for qid in missing if qid != 2]
        if missing:
            st.error(f"Please answer every question (missing: {', '.join(f'Q{qid}' for qid in missing)}).")
        else:
            _simulate_latency(settings, "skin", "Analyzing your skin profile...")
            result = skin.run_inference(answers)
            st.session_state["skin_result"] = result
            if store.user:
                store.append_skin_analysis(skin.build_record(result))

    result = st.session_state.get("skin_result")
    if not result:
        return

    m1, m2, m3 = st.columns(3)
    m1.metric("Skin type", result["skin_type"])
    m2.metric("Skin score", f"{result['skin_score']}/100")
    m3.metric("Concerns", len(result["primary_concerns"]))

    st.markdown("#### Recommended products")
    st.dataframe(
        pd.DataFrame(
            [{"Step": step.title(), **product} for step, product in result["recommendations"].items()]
        ),
        use_container_width=True,
    )
    morning_col, evening_col = st.columns(2)
    with morning_col:
        st.markdown("#### Morning routine")
        st.dataframe(pd.DataFrame(result["routine"]["morning"]), use_container_width=True)
    with evening_col:
        st.markdown("#### Evening routine")
        st.dataframe(pd.DataFrame(result["routine"]["evening"]), use_container_width=True)
    st.markdown("#### Tips")
    for tip in result["tips"]:
        st.write(f"- {tip}")
    st.markdown("#### Adoption schedule")
    st.code(result["schedule"], language=None)


def _render_activities(store):
    st.header("Fun Activities")
    quiz_tab, tip_tab, breathing_tab = st.tabs(["Health Quiz", "Wellness Tip", "Breathing"])

    with quiz_tab:
        with st.form("health_quiz"):
            answers = {}
            for item in activities.QUESTIONS:
                choice = st.radio(item["question"], item["options"], index=None, key=f"quiz_{item['id']}")
                answers[item["id"]] = item["options"].index(choice) if choice is not None else None
            submitted = st.form_submit_button("Submit answers", type="primary")
        if submitted:
            outcome = activities.score_quiz(answers)
            st.success(f"Your Score: {outcome['score']} out of {outcome['total_questions']}. {outcome['message']}")
            for item in activities.QUESTIONS:
                icon = "✅" if activities.check_answer(item["id"], answers[item["id"]]) else "❌"
                st.caption(f"{icon} {item['explanation']}")
            if store.user:
                store.append_quiz(activities.build_record(outcome))

    with tip_tab:
        st.info(activities.daily_tip())
        if st.button("Another tip"):
            st.write(activities.random_tip())

    with breathing_tab:
        st.write("Box-style breathing: 5 cycles of inhale, hold, exhale and rest.")
        plan = pd.DataFrame(activities.breathing_plan())
        st.dataframe(plan, use_container_width=True, height=240)
        if st.button("Start breathing exercise"):
            placeholder = st.empty()
            for step in activities.breathing_plan():
                placeholder.markdown(f"**Cycle {step['cycle']}/5 · {step['phase'].title()}** - {step['prompt']}")
                time.sleep(step["seconds"])
            placeholder.success("Well done! Exercise complete.")


def _render_feedback(store, settings):
    st.header("Feedback")
    with st.form("feedback_form"):
        name = st.text_input("Name")
        email = st.text_input("Email")
        category = st.selectbox("Category", ["Select a category..."] + FEEDBACK_CATEGORIES)
        rating = st.slider("Rating", min_value=1, max_value=5, value=5)
        message = st.text_area("Message")
        submitted = st.form_submit_button("Send feedback", type="primary")
    if not submitted:
        return
    try:
        _simulate_latency(settings, "feedback", "Sending feedback...")
        store.submit_feedback(name, email, category, rating, message)
    except FeedbackError as exc:
        logger.info("Feedback rejected: %s", exc)
        st.error(str(exc))
        return
    st.success("Thank you! Your feedback helps us improve MediMate.")


def _render_dashboard(store):
    if not store.user:
        st.info("Please sign in to view your dashboard.")
        return
    user = store.user
    history = store.history
    st.header(f"Welcome back, {user['name']}")

    counts = dashboard.activity_counts(history)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Symptom checks", counts["symptoms"])
    c2.metric("Reports analyzed", counts["reports"])
    c3.metric("Quizzes taken", counts["quizzes"])
    c4.metric("Days active", dashboard.days_since_join(user))

    progress = dashboard.wellness_progress(history)
    st.progress(progress / 100, text=f"Wellness progress: {progress}%")

    st.markdown("#### Recent activity")
    recent = dashboard.recent_activity(history)
    if recent.empty:
        st.caption("No activity yet. Try the symptom checker or the health quiz.")
    else:
        recent["Date"] = recent["Date"].dt.strftime("%b %d, %Y - %I:%M %p")
        st.dataframe(recent, use_container_width=True)

    trend = dashboard.skin_score_trend(history)
    if not trend.empty:
        st.markdown("#### Skin score trend")
        chart = (
            alt.Chart(trend)
            .mark_line(point=True)
            .encode(
                x=alt.X("Date:T"),
                y=alt.Y("Score:Q", scale=alt.Scale(domain=[40, 85])),
                tooltip=["Date:T", "Score:Q", "Skin Type:N"],
            )
        )
        st.altair_chart(chart, use_container_width=True)

    for kind, title in [("symptoms", "Symptom history"), ("reports", "Report history"), ("quizzes", "Quiz history")]:
        with st.expander(title):
            frame = dashboard.history_frame(history, kind)
            if frame.empty:
                st.caption("Nothing here yet.")
            else:
                st.dataframe(frame, use_container_width=True)


def _render_account(store):
    if store.user:
        st.success(f"Signed in as {store.user['name']}")
        if st.button("Logout"):
            store.logout()
            st.rerun()
        return

    login_tab, signup_tab = st.tabs(["Login", "Sign up"])
    with login_tab:
        with st.form("login_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in", type="primary")
        demo = store.settings.get("demo_account", {})
        if demo.get("enabled"):
            st.caption(f"Demo account: {demo['email']} | Password: {demo['password']}")
        if submitted:
            if store.login(email, password):
                st.rerun()
            else:
                st.error("Invalid email or password. Please try again.")

    with signup_tab:
        with st.form("signup_form"):
            name = st.text_input("Full name")
            email = st.text_input("Email", key="signup_email")
            password = st.text_input("Password", type="password", key="signup_password")
            confirm = st.text_input("Confirm password", type="password")
            submitted = st.form_submit_button("Create account", type="primary")
        if submitted:
            error = validate_signup(name, email, password, confirm)
            if error:
                st.error(error)
            elif store.signup(name.strip(), email, password):
                st.rerun()
            else:
                st.error("An account with this email already exists.")


st.set_page_config(page_title="MediMate", layout="wide")
st.markdown("<h1 style='text-align: center;'>MediMate</h1>", unsafe_allow_html=True)

store, settings = _get_store()

with st.sidebar:
    st.title("MediMate")
    page = st.radio(
        "Main Menu",
        ["Home", "Quick Check", "Report Scanner", "Skin Analysis", "Fun Activities", "Feedback", "Dashboard", "Account"],
    )
    if store.user:
        st.info(f"**{store.user['name']}**")
    st.divider()
    st.caption("v1.0.0 • Local storage")

if page == "Home":
    _render_home()
elif page == "Quick Check":
    _render_quickcheck(store, settings)
elif page == "Report Scanner":
    _render_report_scanner(store, settings)
elif page == "Skin Analysis":
    _render_skin_analysis(store, settings)
elif page == "Fun Activities":
    _render_activities(store)
elif page == "Feedback":
    _render_feedback(store, settings)
elif page == "Dashboard":
    _render_dashboard(store)
else:
    _render_account(store)
