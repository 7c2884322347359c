"""
HTML email templates.

Every builder returns an EmailContent (subject + html). Names and other
user-provided strings are HTML-escaped before they are interpolated.
"""
from dataclasses import dataclass
from html import escape
from typing import Optional

from core.config import CLINIC_NAME, PORTAL_BASE_URL

BRAND_COLOR = "#5D7A5F"


@dataclass(frozen=True)
class EmailContent:
    subject: str
    html: str


_STYLES = f"""
    body {{ font-family: 'Helvetica Neue', Arial, sans-serif; line-height: 1.8; color: #333; margin: 0; padding: 0; background: #f5f5f5; }}
    .container {{ max-width: 600px; margin: 0 auto; background: #ffffff; }}
    .header {{ background: {BRAND_COLOR}; color: #ffffff; padding: 32px; text-align: center; }}
    .header h1 {{ margin: 0; font-size: 26px; font-weight: 400; }}
    .content {{ padding: 36px 32px; }}
    .content h2 {{ color: {BRAND_COLOR}; font-weight: 500; margin-top: 0; }}
    .info-box {{ background: #f4f7f4; border-left: 4px solid {BRAND_COLOR}; padding: 16px 20px; margin: 20px 0; }}
    .reminder-box {{ background: #fff3cd; border-left: 4px solid #ffc107; padding: 16px 20px; margin: 20px 0; }}
    .cta-container {{ text-align: center; margin: 30px 0; }}
    .cta-button {{ display: inline-block; background: {BRAND_COLOR}; color: #ffffff !important; padding: 16px 32px; text-decoration: none; border-radius: 8px; font-size: 16px; font-weight: 600; }}
    .footer {{ padding: 28px; text-align: center; font-size: 14px; color: #888; background: #f9f9f9; border-top: 1px solid #eee; }}
    .footer a {{ color: {BRAND_COLOR}; text-decoration: none; }}
"""


def _layout(heading: str, body: str, clinic_name: str = CLINIC_NAME) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>{_STYLES}</style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>{escape(clinic_name)}</h1></div>
    <div class="content">
      <h2>{heading}</h2>
      {body}
      <p>Warm regards,<br><strong>The {escape(clinic_name)} Team</strong></p>
    </div>
    <div class="footer">
      <p>{escape(clinic_name)}</p>
      <p><a href="{PORTAL_BASE_URL}">{PORTAL_BASE_URL}</a></p>
    </div>
  </div>
</body>
</html>"""


def _button(link: str, label: str) -> str:
    return f'<div class="cta-container"><a href="{escape(link, quote=True)}" class="cta-button">{label}</a></div>'


def _full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    return " ".join(p for p in (first_name, last_name) if p).strip()


# =============================================================================
# INTAKE
# =============================================================================

def intake_confirmation(first_name: str) -> EmailContent:
    body = """
      <p>We have received your application and are excited to connect with you on your wellness journey.</p>
      <p>Our team will review your information carefully and reach out to schedule a consultation call.</p>
      <p>During this call, we'll discuss:</p>
      <ul style="color: #555;">
        <li>Your health goals and expectations</li>
        <li>The treatment process and what to expect</li>
        <li>Next steps in your journey</li>
      </ul>
    """
    return EmailContent(
        subject=f"Thank You for Your Application | {CLINIC_NAME}",
        html=_layout(f"Thank You, {escape(first_name)}!", body),
    )


def partial_intake_invitation(
    mode: str,
    filled_by: str,
    recipient_name: str,
    recipient_email: str,
    patient_first_name: str,
    patient_last_name: str,
    form_link: str,
    expires_in_days: int,
) -> EmailContent:
    """
    One of four variants: minimal/partial form, addressed to the patient
    themself or to the person filling it in for them.
    """
    is_minimal = mode == "minimal"
    is_self = filled_by == "self"
    patient = escape(_full_name(patient_first_name, patient_last_name))

    if is_self:
        subject = f"Complete Your Intake Form - {_full_name(patient_first_name, patient_last_name)} | {CLINIC_NAME}"
        box_title = "Your Information" if is_minimal else "Your Information (Pre-filled)"
        if is_minimal:
            intro = f"We need you to complete your intake form for {escape(CLINIC_NAME)}."
        else:
            intro = ("We need you to complete the remaining sections of your intake form. "
                     "Some information has already been entered for you.")
    else:
        subject = f"Complete Intake Form for {_full_name(patient_first_name, patient_last_name)} | {CLINIC_NAME}"
        box_title = "Patient Information" if is_minimal else "Patient Information (Pre-filled)"
        if is_minimal:
            intro = f"You have been asked to complete the intake form for <strong>{patient}</strong>."
        else:
            intro = (f"You have been asked to complete the remaining sections of the intake form for "
                     f"<strong>{patient}</strong>. Some information has already been entered.")

    if is_minimal:
        instructions = "Please complete the intake form with all required information."
    else:
        instructions = "Please review the pre-filled details and complete the remaining sections."

    body = f"""
      <p>{intro}</p>
      <div class="info-box">
        <p><strong>{box_title}:</strong></p>
        <p>Name: {patient}</p>
        <p>Email: {escape(recipient_email)}</p>
        <p>{instructions}</p>
      </div>
      {_button(form_link, "Complete Intake Form")}
      <p style="color: #888; font-size: 14px;">This link expires in {expires_in_days} days.</p>
    """
    return EmailContent(subject=subject, html=_layout(f"Hello {escape(recipient_name)},", body))


# =============================================================================
# FORM CONFIRMATIONS
# =============================================================================

def medical_history_confirmation(
    recipient_first_name: str,
    patient_first_name: str,
    patient_last_name: str,
    is_filler: bool = False,
) -> EmailContent:
    patient = escape(_full_name(patient_first_name, patient_last_name))
    if is_filler:
        intro = f"Thank you for submitting the medical health history form for <strong>{patient}</strong>."
    else:
        intro = "Thank you for submitting your medical health history form."
    body = f"""
      <p>{intro}</p>
      <p>Our medical team will review the information before the consultation. We will contact you if anything else is needed.</p>
    """
    return EmailContent(
        subject=f"Medical History Form Received | {CLINIC_NAME}",
        html=_layout(f"Thank You, {escape(recipient_first_name)}!", body),
    )


def service_agreement_confirmation(
    recipient_first_name: str,
    patient_first_name: str,
    patient_last_name: str,
    is_filler: bool = False,
) -> EmailContent:
    patient = escape(_full_name(patient_first_name, patient_last_name))
    if is_filler:
        intro = f"The service agreement for <strong>{patient}</strong> has been signed and received."
    else:
        intro = "Your signed service agreement has been received."
    body = f"""
      <p>{intro}</p>
      <p>You can review the agreement at any time from the patient portal.</p>
      {_button(f"{PORTAL_BASE_URL}/patient/tasks", "Go to Patient Portal")}
    """
    return EmailContent(
        subject=f"Service Agreement Received | {CLINIC_NAME}",
        html=_layout(f"Thank You, {escape(recipient_first_name)}!", body),
    )


def ibogaine_consent_invitation(first_name: str, form_link: str) -> EmailContent:
    body = f"""
      <p>Your Ibogaine Therapy Consent Form is now available in the patient portal.</p>
      <div class="info-box">
        <p>Please read each section carefully, confirm every consent item and sign the form.</p>
      </div>
      {_button(form_link, "Complete Consent Form")}
    """
    return EmailContent(
        subject=f"Complete Your Ibogaine Therapy Consent Form | {CLINIC_NAME}",
        html=_layout(f"Hello {escape(first_name)},", body),
    )


def form_invitation(
    form_name: str,
    recipient_name: str,
    patient_first_name: Optional[str],
    patient_last_name: Optional[str],
    form_link: str,
    filled_by: str = "self",
) -> EmailContent:
    """Link to an onboarding form, sent again by staff from the pipeline."""
    patient = _full_name(patient_first_name, patient_last_name)
    if filled_by == "someone_else" and patient:
        intro = f"Please complete the {escape(form_name)} form for <strong>{escape(patient)}</strong>."
        subject = f"Complete {form_name} Form for {patient} | {CLINIC_NAME}"
    else:
        intro = f"Please complete your {escape(form_name)} form."
        subject = f"Complete Your {form_name} Form | {CLINIC_NAME}"
    body = f"""
      <p>{intro}</p>
      <div class="info-box">
        <p>The form takes a few minutes. Your answers are saved when you submit.</p>
      </div>
      {_button(form_link, f"Complete {escape(form_name)} Form")}
    """
    return EmailContent(subject=subject, html=_layout(f"Hello {escape(recipient_name)},", body))


# =============================================================================
# REMINDERS
# =============================================================================

def form_reminder(first_name: str, form_name: str) -> EmailContent:
    form_link = f"{PORTAL_BASE_URL}/patient/tasks"
    body = f"""
      <div class="reminder-box">
        <p><strong>Action Required</strong></p>
        <p>We haven't received your {escape(form_name)} form yet. Please complete it as soon as possible.</p>
      </div>
      <p>To complete your {escape(form_name)} form:</p>
      <ol style="color: #555; line-height: 2;">
        <li><strong>Go to your Tasks page</strong></li>
        <li><strong>Click "Start" on the {escape(form_name)} task</strong></li>
        <li><strong>Complete and submit the form</strong></li>
      </ol>
      {_button(form_link, "Go to Patient Portal")}
    """
    return EmailContent(
        subject=f"Reminder: Complete Your {form_name} Form | {CLINIC_NAME}",
        html=_layout(f"Reminder: Complete Your {escape(form_name)} Form, {escape(first_name)}!", body),
    )
