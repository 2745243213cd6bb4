import streamlit as st

# MUST be the first Streamlit command
st.set_page_config(layout="wide", page_title="Résumé Tailor")

from resume_tailor.config import DEFAULT_MODEL, LLM_PROVIDER, get_model_for_provider, setup_logging
from resume_tailor.errors import ResumeTailorError
from resume_tailor.extractor import ACCEPTED_EXTENSIONS
from resume_tailor.schema_resume import sections_to_json
from resume_tailor.session import KEY_FILE_NAME, KEY_JOB, KEY_SECTIONS, KEY_TEXT, Stage, TailorSession, process_upload
from resume_tailor.suggestions import generate_suggestions

setup_logging()

# Available models for each provider
MODEL_OPTIONS = {
    "openai": ["gpt-4o", "gpt-4o-mini", "gpt-4-turbo"],
    "ollama": ["llama3.1:8b", "llama3.1:70b", "mistral:7b", "qwen2.5:7b"],
}

# Initialize session state variables
if "stage" not in st.session_state:
    st.session_state.stage = Stage.UPLOAD.value
# Working copy of the session, loaded once per page entry
if "tailor" not in st.session_state:
    st.session_state.tailor = None
# Whether the bulk suggestion pass already ran for the current editor visit
if "suggestions_requested" not in st.session_state:
    st.session_state.suggestions_requested = False
if "editor_error" not in st.session_state:
    st.session_state.editor_error = None
if "selected_model" not in st.session_state:
    st.session_state.selected_model = get_model_for_provider()


# --- Helpers ---
def go_to(stage: Stage):
    st.session_state.stage = stage.value
    st.session_state.tailor = None
    st.session_state.editor_error = None


def enter_page(stage: Stage) -> TailorSession:
    """Load persisted state on page entry and redirect when it is incomplete."""
    if st.session_state.tailor is None:
        tailor = TailorSession.load(st.session_state)
        for section in tailor.sections:
            st.session_state[f"edit_{section.id}"] = section.content
        st.session_state.tailor = tailor
    target = st.session_state.tailor.redirect_for(stage)
    if target is not None:
        go_to(target)
        st.rerun()
    return st.session_state.tailor


def start_over():
    for key in (KEY_FILE_NAME, KEY_TEXT, KEY_SECTIONS, KEY_JOB):
        st.session_state.pop(key, None)
    st.session_state.suggestions_requested = False
    go_to(Stage.UPLOAD)


def run_suggestion_pass(tailor: TailorSession):
    with st.status("🤖 Generating AI suggestions...", expanded=False) as status_ui:

        def status_update_callback(message: str):
            status_ui.write(message)
            if not message.startswith("⚠️"):
                status_ui.update(label=message)

        try:
            result = generate_suggestions(
                tailor.sections,
                tailor.job_description,
                model=st.session_state.selected_model,
                status_callback=status_update_callback,
            )
        except ResumeTailorError as e:
            st.session_state.editor_error = str(e)
            status_ui.update(label="❌ Could not generate suggestions.", state="error")
            return

        tailor.sections = result.sections
        if result.failed:
            status_ui.update(
                label=f"⚠️ Suggestions ready, {len(result.failed)} section(s) failed.",
                state="error",
            )
        else:
            status_ui.update(label="✅ Suggestions ready.", state="complete")


def on_section_edit(section_id: str):
    st.session_state.tailor.update_section_content(
        section_id, st.session_state[f"edit_{section_id}"]
    )


def improve_section(section_id: str, instruction_key: str = "ai_prompt"):
    # the shared assistant prompt steers per-section rewrites too
    instruction = st.session_state.get(instruction_key, "")
    try:
        new_content = st.session_state.tailor.improve_section(
            section_id, instruction=instruction, model=st.session_state.selected_model
        )
    except ResumeTailorError as e:
        st.session_state.editor_error = str(e)
        return
    st.session_state[f"edit_{section_id}"] = new_content
    st.session_state[instruction_key] = ""
    st.session_state.editor_error = None


def improve_from_prompt():
    improve_section(st.session_state.ai_target)


# --- Sidebar: model selection ---
with st.sidebar:
    st.markdown("### 🤖 AI Model")
    options = MODEL_OPTIONS.get(LLM_PROVIDER, [DEFAULT_MODEL.get(LLM_PROVIDER, "gpt-4o")])
    if st.session_state.selected_model not in options:
        options = [st.session_state.selected_model] + options
    st.selectbox(
        f"Model ({LLM_PROVIDER})",
        options=options,
        key="selected_model",
        help="Set LLM_PROVIDER to switch between OpenAI and a local Ollama server",
    )


# --- Pages ---
def render_upload():
    enter_page(Stage.UPLOAD)
    st.title("📄 Upload Your Resume")
    st.markdown(
        "Upload your existing resume to get started. "
        "We accept PDF, Word documents, and plain text files."
    )

    uploaded = st.file_uploader(
        "Drag and drop your resume here", type=list(ACCEPTED_EXTENSIONS), key="resume_upload"
    )
    if uploaded:
        st.caption(f"📎 {uploaded.name} · {uploaded.size / 1024 / 1024:.2f} MB")

    if st.button("Continue", type="primary", disabled=uploaded is None):
        try:
            with st.spinner("Reading file and analyzing resume structure..."):
                process_upload(st.session_state, uploaded)
        except ResumeTailorError as e:
            st.error(f"Failed to process the resume: {e}")
            return
        st.session_state.suggestions_requested = False
        go_to(Stage.JOB_DESCRIPTION)
        st.rerun()


def render_job_description():
    tailor = enter_page(Stage.JOB_DESCRIPTION)
    st.title("🎯 Target Job Description")
    st.markdown(f"Tailoring **{tailor.file_name}**. Paste the job description you are applying for.")

    job_text = st.text_area(
        "Job description", value=tailor.job_description or "", height=300, key="job_input"
    )

    col_back, col_next = st.columns([1, 1])
    with col_back:
        if st.button("Back", use_container_width=True):
            go_to(Stage.UPLOAD)
            st.rerun()
    with col_next:
        if st.button("Continue", type="primary", use_container_width=True):
            if not job_text.strip():
                st.error("Please paste a job description.")
                return
            tailor.save_job_description(st.session_state, job_text)
            st.session_state.suggestions_requested = False
            go_to(Stage.EDITOR)
            st.rerun()


def render_editor():
    tailor = enter_page(Stage.EDITOR)
    st.title("✏️ Tailor Your Resume")
    st.caption(f"📎 {tailor.file_name}")

    # runs before any editor control is drawn
    if not st.session_state.suggestions_requested:
        st.session_state.suggestions_requested = True
        run_suggestion_pass(tailor)

    if st.session_state.editor_error:
        st.error(st.session_state.editor_error)

    tab_edit, tab_preview = st.tabs(["Edit Resume", "Preview"])

    with tab_edit:
        col_sections, col_ai = st.columns([2, 1])

        with col_sections:
            for section in tailor.sections:
                with st.container(border=True):
                    st.subheader(section.title)
                    st.text_area(
                        section.title,
                        key=f"edit_{section.id}",
                        height=200,
                        label_visibility="collapsed",
                        on_change=on_section_edit,
                        args=(section.id,),
                    )
                    st.button(
                        "✨ Improve with AI",
                        key=f"improve_{section.id}",
                        on_click=improve_section,
                        args=(section.id,),
                    )

        with col_ai:
            with st.container(border=True):
                st.markdown("**🤖 AI Assistant**")
                st.caption("Get AI-powered suggestions to improve your resume")
                titles = {s.id: s.title for s in tailor.sections}
                st.selectbox(
                    "Section", options=list(titles), format_func=titles.get, key="ai_target"
                )
                st.text_area(
                    "Ask the AI for help",
                    key="ai_prompt",
                    placeholder="E.g., 'Make my summary more focused on leadership skills'",
                )
                st.button(
                    "Send",
                    type="primary",
                    disabled=not st.session_state.get("ai_prompt", "").strip(),
                    on_click=improve_from_prompt,
                )

            with st.expander("📋 Job Description"):
                st.text(tailor.job_description)

            with st.container(border=True):
                st.markdown("**💡 AI Suggestions**")
                with_suggestions = [s for s in tailor.sections if s.suggestions]
                for section in with_suggestions:
                    st.markdown(f"**{section.title}**")
                    st.markdown(section.suggestions)
                if not with_suggestions:
                    st.caption("No suggestions generated yet")
                if st.button("🔄 Generate New Suggestions"):
                    st.session_state.suggestions_requested = False
                    st.rerun()

    with tab_preview:
        for section in tailor.sections:
            st.markdown(f"### {section.title}")
            st.text(section.content)
        st.download_button(
            label="📥 Download",
            data=tailor.resume_as_text(),
            file_name="resume.txt",
            mime="text/plain",
        )

    st.divider()
    col_back, col_next = st.columns([1, 1])
    with col_back:
        if st.button("Back", use_container_width=True, key="editor_back"):
            tailor.save_sections(st.session_state)
            go_to(Stage.JOB_DESCRIPTION)
            st.rerun()
    with col_next:
        if st.button("Continue to Templates", type="primary", use_container_width=True):
            tailor.save_sections(st.session_state)
            go_to(Stage.TEMPLATES)
            st.rerun()


def render_templates():
    tailor = enter_page(Stage.TEMPLATES)
    st.title("🧩 Templates")
    st.markdown(f"Your tailored resume has **{len(tailor.sections)}** sections ready for a template.")
    st.json([s.model_dump(exclude_none=True) for s in tailor.sections], expanded=False)

    col_json, col_txt = st.columns(2)
    with col_json:
        st.download_button(
            "📥 Sections (JSON)",
            data=sections_to_json(tailor.sections),
            file_name="resume_sections.json",
            mime="application/json",
            use_container_width=True,
        )
    with col_txt:
        st.download_button(
            "📥 Resume (text)",
            data=tailor.resume_as_text(),
            file_name="resume.txt",
            mime="text/plain",
            use_container_width=True,
        )

    col_back, col_restart = st.columns(2)
    with col_back:
        if st.button("Back to Editor", use_container_width=True):
            st.session_state.suggestions_requested = True
            go_to(Stage.EDITOR)
            st.rerun()
    with col_restart:
        if st.button("Start Over", use_container_width=True):
            start_over()
            st.rerun()


PAGES = {
    Stage.UPLOAD: render_upload,
    Stage.JOB_DESCRIPTION: render_job_description,
    Stage.EDITOR: render_editor,
    Stage.TEMPLATES: render_templates,
}

PAGES[Stage(st.session_state.stage)]()
