from pydantic import BaseModel, ConfigDict
from typing import Literal, Optional

ThemeLiteral = Literal["Rock Bottom", "Midnight", "Eco-Green", "Modern Minimalist"]

class AppSettings(BaseModel):
    model_config = ConfigDict(frozen=True)
    theme: ThemeLiteral = "Rock Bottom"
    logo_url: Optional[str] = None
    show_logo_on_bill: bool = True
    show_address_on_bill: bool = True
    invoice_header: str = "Cafe Rock Bottom"
    invoice_footer: str = "Visit Again! Follow us @caferockbottom"
    gst_enabled: bool = False
    gst_percentage: float = 5

class BusinessProfile(BaseModel):
    model_config = ConfigDict(frozen=True)
    owner_name: str = "Cafe Rock Bottom"
    owner_number: str = "+91 98765 43210"
    fssai: str = "12345678901234"
    address: str = "41, Mangalmurti Sq, Jaitala Road, Nagpur-440022"
