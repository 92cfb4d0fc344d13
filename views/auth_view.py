"""
Auth View - sign in, sign up and password reset.
"""

import streamlit as st

from config.auth import get_current_user
from controllers.auth_controller import AuthController


class AuthView:
    """View for the account page."""

    def __init__(self):
        self.controller = AuthController()

    def render(self):
        st.title("🔐 Account")

        user = get_current_user()
        if user:
            st.success(f"Signed in as **{user.name}** ({user.email})")
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Go to Profile", use_container_width=True):
                    st.switch_page("pages/7_👤_Profile.py")
            with col2:
                if st.button("Sign Out", type="primary", use_container_width=True):
                    self.controller.sign_out()
                    st.rerun()
            return

        sign_in_tab, sign_up_tab, reset_tab = st.tabs(["Sign In", "Create Account", "Forgot Password"])
        with sign_in_tab:
            self._render_sign_in()
        with sign_up_tab:
            self._render_sign_up()
        with reset_tab:
            self._render_reset()

    def _render_sign_in(self):
        with st.form("sign_in"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            if st.form_submit_button("Sign In", type="primary", use_container_width=True):
                success, error = self.controller.sign_in(email, password)
                if success:
                    st.switch_page("streamlit_app.py")
                st.error(error)

    def _render_sign_up(self):
        with st.form("sign_up"):
            full_name = st.text_input("Full name")
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            confirm = st.text_input("Confirm password", type="password")
            if st.form_submit_button("Create Account", type="primary", use_container_width=True):
                success, error = self.controller.sign_up(email, password, confirm, full_name)
                if success:
                    st.switch_page("streamlit_app.py")
                st.error(error)

    def _render_reset(self):
        with st.form("reset_request"):
            email = st.text_input("Email")
            if st.form_submit_button("Send reset code"):
                success, error, token = self.controller.request_password_reset(email)
                if success:
                    st.session_state.auth_reset_token = token
                else:
                    st.error(error)

        token = st.session_state.get("auth_reset_token")
        if token:
            st.info("Use this reset code to choose a new password:")
            st.code(token)

        with st.form("reset_confirm"):
            code = st.text_input("Reset code", value=token or "")
            new_password = st.text_input("New password", type="password")
            confirm = st.text_input("Confirm new password", type="password")
            if st.form_submit_button("Update password"):
                success, error = self.controller.confirm_password_reset(code, new_password, confirm)
                if success:
                    st.session_state.pop("auth_reset_token", None)
                    st.success("Password updated. You can sign in now.")
                else:
                    st.error(error)
