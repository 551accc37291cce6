import streamlit as st

from indefinite.engine import ComputationResult, IntegrationEngine
from indefinite.options import IntegrationOptions

# ==========================================
# UI & Frontend Logic (Streamlit)
# ==========================================

EXAMPLES = {
    "Polynomial and sine": "3*x**2 + 2*x + sin(x)",
    "By parts (cyclic)": "exp(x)*sin(x)",
    "Substitution": "exp(x)/(exp(x) + 1)",
    "Partial fractions": "(3*x + 1)/(x**2 + x + 1)",
    "Trigonometric powers": "sin(x)**2*cos(x)**2",
    "Risch closed form": "(1 + 2*x**2)*exp(x**2)",
    "Non-elementary": "exp(x**2)",
}


class ApplicationUI:
    """Manages Streamlit UI rendering and state."""

    def __init__(self):
        self._initialize_state()

    def _initialize_state(self):
        if "history" not in st.session_state:
            st.session_state.history = []

    def render_settings(self) -> IntegrationOptions:
        st.sidebar.title("Settings")
        max_depth = st.sidebar.slider("Maximum recursion depth", min_value=1, max_value=20, value=10)
        risch = st.sidebar.toggle("Risch decision procedure", value=True,
                                  help="Prove when no elementary antiderivative exists.")
        timeout = st.sidebar.number_input("Timeout (seconds)", min_value=1.0, max_value=120.0, value=20.0, step=1.0)
        return IntegrationOptions(max_depth=max_depth, risch=risch, timeout=timeout)

    def render_sidebar(self):
        st.sidebar.title("Computation History")
        if not st.session_state.history:
            st.sidebar.info("No computations yet.")
            return

        if st.sidebar.button("Clear History"):
            st.session_state.history = []
            st.rerun()

        st.sidebar.markdown("---")
        for idx, item in enumerate(reversed(st.session_state.history)):
            res = item['result']
            with st.sidebar.expander(f"Run {len(st.session_state.history) - idx}: {item['input']}"):
                st.caption(res.method)
                st.latex(res.final_answer)

    def render_steps(self, steps):
        previous = None
        for i, (label, step) in enumerate(steps, 1):
            if label != previous:
                st.caption(label)
                previous = label
            st.markdown(f"**Step {i}:**")
            st.latex(step)

    def render_trail(self, res: ComputationResult, variable: str):
        st.markdown("---")
        st.markdown("### 🧩 Solution Trail")

        st.markdown("**1. GIVEN:**")
        st.info(f"$$ {res.given} $$")

        st.markdown("**2. METHOD:**")
        st.markdown(f"> {res.method}")

        st.markdown("**3. STEPS:**")
        with st.container():
            self.render_steps(res.steps)

        st.markdown("**4. FINAL ANSWER:**")
        st.success(f"$$ \\int f({variable})\\,d{variable} = {res.final_answer} $$")

        # derivative in LaTeX, then the verdict in Markdown
        st.markdown("**5. VERIFICATION:**")
        derivative, _, verdict = res.verification.partition("\n\n")
        st.latex(derivative)
        if res.is_verified:
            st.success(verdict)
        else:
            st.warning(verdict or res.verification)

        st.markdown("**6. SUMMARY:**")
        col1, col2 = st.columns(2)
        with col1:
            st.caption(f"**Runtime:** {res.summary.get('Runtime', 'N/A')}")
            st.caption(f"**Techniques:** {res.summary.get('Techniques', 'N/A')}")
        with col2:
            st.caption(f"**Timestamp:** {res.summary.get('Timestamp', 'N/A')}")

    def render_failure(self, res: ComputationResult):
        if not res.is_non_elementary:
            st.error("Computation Failed")
            st.error(res.error_message)
            return
        st.warning("No Elementary Antiderivative")
        st.markdown(f"**GIVEN:** $ {res.given} $")
        st.markdown(f"> {res.method}")
        self.render_steps(res.steps)
        st.info(res.error_message)

    def run(self):
        st.set_page_config(page_title="Symbolic Integrator", page_icon="∫", layout="wide")
        st.title("∫ Symbolic Indefinite Integration Generator")
        st.markdown("Enter a mathematical expression to compute its indefinite integral. "
                    "Integrands without an elementary antiderivative are recognised as such.")

        options = self.render_settings()
        self.render_sidebar()
        engine = IntegrationEngine(options)

        example = st.selectbox("Start from an example", list(EXAMPLES))

        with st.form("compute_form"):
            col1, col2, col3 = st.columns([4, 1, 1])
            with col1:
                expr_input = st.text_input("Integrand f(x)", value=EXAMPLES[example],
                                           placeholder="e.g., x*exp(x), exp(x**2)")
            with col2:
                variable = st.text_input("Variable", value="x")
            with col3:
                st.markdown("<br>", unsafe_allow_html=True)
                submit_button = st.form_submit_button("Compute", type="primary")

        if not submit_button:
            return
        variable = variable.strip()
        if not expr_input.strip() or not variable.isidentifier():
            st.error("Please enter a valid mathematical expression and variable name.")
            return

        with st.spinner("Searching the strategy chain and verifying..."):
            result = engine.compute(expr_input, variable)

        if result.is_success:
            self.render_trail(result, variable)
            st.session_state.history.append({
                "input": expr_input,
                "result": result
            })
        else:
            self.render_failure(result)


if __name__ == "__main__":
    app = ApplicationUI()
    app.run()
