# form_config.py

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class RechargeOption:
    name: str
    icon: str


@dataclass(frozen=True)
class ServiceDescriptor:
    key: str
    name: str
    icon: str
    description: str
    category: str
    documents: Tuple[str, ...] = ()
    recharge_options: Tuple[RechargeOption, ...] = field(default=())

    @property
    def is_recharge(self) -> bool:
        return bool(self.recharge_options)


_SERVICES = (
    ServiceDescriptor(
        key="pan",
        name="PAN Card",
        icon="🆔",
        description="Apply for a new PAN card or update existing PAN card details",
        category="identity",
        documents=(
            "Photo (Passport size - 35mm x 45mm)",
            "Signature (on white paper)",
            "Aadhar Card (Copy)",
            "Address Proof (Aadhar/Utility Bill/Rent Agreement)",
            "Mother's Name",
            "Father's Name",
            "Husband's Full Name (if applicable)",
            "Phone Number",
            "Email Address",
        ),
    ),
    ServiceDescriptor(
        key="aadhar",
        name="Aadhar Card",
        icon="🪪",
        description="Apply for new Aadhar card, update details, or download e-Aadhar",
        category="identity",
        documents=(
            "Birth Certificate or School Certificate",
            "Photo (for new enrollment)",
            "Address Proof (Electricity Bill/Rent Agreement/Bank Statement)",
            "Identity Proof (PAN/Voter ID/Driving License)",
            "Phone Number",
            "Email Address",
        ),
    ),
    ServiceDescriptor(
        key="scholarship",
        name="Scholarship Forms",
        icon="🎓",
        description="Apply for various government scholarships (Post-Matric, Merit, etc.)",
        category="education",
        documents=(
            "Income Certificate",
            "Caste Certificate (if applicable)",
            "Domicile Certificate",
            "Previous Year Marksheet",
            "Bank Account Details",
            "Aadhar Card",
            "Passport Size Photo",
            "School/College ID Card",
        ),
    ),
    ServiceDescriptor(
        key="caste",
        name="Caste Certificate",
        icon="📜",
        description="Apply for or renew caste certificate",
        category="certificate",
        documents=(
            "Birth Certificate",
            "School Leaving Certificate",
            "Father's/Mother's Caste Certificate",
            "Aadhar Card",
            "Ration Card (if available)",
            "Address Proof",
            "Passport Size Photo",
            "Affidavit (if required)",
        ),
    ),
    ServiceDescriptor(
        key="domicile",
        name="Domicile Certificate",
        icon="🏠",
        description="Apply for domicile certificate of Maharashtra",
        category="certificate",
        documents=(
            "Birth Certificate",
            "School Leaving Certificate (SSC/HSC)",
            "Aadhar Card",
            "Address Proof (Electricity Bill/Rent Agreement)",
            "Father's/Mother's Domicile Certificate (if available)",
            "Passport Size Photo",
            "Affidavit",
        ),
    ),
    ServiceDescriptor(
        key="ladkiBahin",
        name="Ladki Bahin KYC",
        icon="👩",
        description="Complete KYC for Ladki Bahin Yojana scheme",
        category="scheme",
        documents=(
            "Aadhar Card",
            "Bank Account Details",
            "Ration Card",
            "Income Certificate",
            "Caste Certificate (if applicable)",
            "Domicile Certificate",
            "Passport Size Photo",
            "Mobile Number (linked with Aadhar)",
            "Email Address",
        ),
    ),
    ServiceDescriptor(
        key="govtExam",
        name="Government Exam Forms",
        icon="📝",
        description="Fill forms for various government exams (MPSC, UPSC, etc.)",
        category="exam",
        documents=(
            "Educational Certificates (10th, 12th, Graduation)",
            "Aadhar Card",
            "PAN Card",
            "Caste Certificate (if applicable)",
            "Domicile Certificate",
            "Passport Size Photo",
            "Signature",
            "Bank Account Details",
            "Email Address",
            "Phone Number",
        ),
    ),
    ServiceDescriptor(
        key="recharge",
        name="Recharge Services",
        icon="📱",
        description="Mobile, DTH, and other recharge services",
        category="recharge",
        recharge_options=(
            RechargeOption("Mobile Recharge", "📱"),
            RechargeOption("DTH Recharge", "📺"),
            RechargeOption("Data Card", "💾"),
            RechargeOption("Electricity Bill", "⚡"),
            RechargeOption("Gas Bill", "🔥"),
            RechargeOption("Water Bill", "💧"),
        ),
    ),
)

SERVICE_CATALOG = {service.key: service for service in _SERVICES}


def get_service_definition(service_key: str) -> Optional[ServiceDescriptor]:
    return SERVICE_CATALOG.get(service_key)


def list_services() -> List[ServiceDescriptor]:
    return list(_SERVICES)


def service_display_name(service_key: str) -> str:
    # unknown keys are still accepted and stored under the raw key
    service = SERVICE_CATALOG.get(service_key)
    return service.name if service else service_key


def recharge_number_label(option_name: str) -> str:
    if "Mobile" in option_name:
        return "Mobile Number"
    if "DTH" in option_name:
        return "Subscriber ID"
    return "Account Number"
