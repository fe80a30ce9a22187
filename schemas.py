from __future__ import annotations
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

# Tables:
# - menu_categories, menu_items
# - orders, order_items
# - table_bookings
# - event_categories, events, event_ticket_sales
# - blog_categories, blog_posts
# - messages, admin_activity_log
# - admin_users, admin_sessions

OrderType = Literal["collection", "delivery"]
OrderStatus = Literal["pending", "confirmed", "in_progress", "completed", "cancelled"]
BookingStatus = Literal["pending", "confirmed", "completed", "cancelled"]
MessageStatus = Literal["new", "read", "replied", "archived"]


# ---------- Auth ----------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# ---------- Menu ----------
class MenuItemCreate(BaseModel):
    name: str
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: str
    image_url: Optional[str] = None
    is_available: bool = True
    stock_level: Optional[int] = None
    sort_order: int = 0


class MenuItemUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    stock_level: Optional[int] = None
    sort_order: Optional[int] = None


class BulkAvailability(BaseModel):
    ids: List[int] = Field(..., min_length=1)
    is_available: bool


class MenuCategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None
    display_order: int = 0


# ---------- Cart / checkout ----------
class CartLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Menu item id")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)
    special_requests: Optional[str] = None


class Cart(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: tuple[CartLine, ...] = ()


class CheckoutIntentRequest(BaseModel):
    amount: float
    currency: str = "gbp"
    cart_items: List[CartLine]
    customer_email: EmailStr
    customer_name: str
    customer_phone: Optional[str] = None
    order_type: OrderType = "collection"
    delivery_address: Optional[str] = None
    special_instructions: Optional[str] = None


class CheckoutConfirmRequest(BaseModel):
    payment_intent_id: str
    cart_items: List[CartLine]
    customer_email: EmailStr
    customer_name: str
    customer_phone: Optional[str] = None
    order_type: OrderType = "collection"
    delivery_address: Optional[str] = None
    special_instructions: Optional[str] = None
    total_amount: float = Field(..., ge=0)


# ---------- Orders ----------
class OrderItemIn(BaseModel):
    menu_item_id: int
    quantity: int = Field(1, ge=1)
    price_at_time: float = Field(..., ge=0)
    special_requests: Optional[str] = None


class OrderCreate(BaseModel):
    customer_name: str
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    order_type: OrderType = "collection"
    total_amount: float = Field(..., ge=0)
    stripe_payment_intent_id: Optional[str] = None
    special_instructions: Optional[str] = None
    delivery_address: Optional[str] = None
    items: List[OrderItemIn] = []


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


# ---------- Bookings ----------
class BookingCreate(BaseModel):
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    party_size: int
    booking_date: str  # YYYY-MM-DD
    booking_time: str  # HH:MM
    special_requests: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


# ---------- Tickets ----------
class TicketIntentRequest(BaseModel):
    event_id: int
    quantity: int
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None


class TicketConfirmRequest(BaseModel):
    payment_intent_id: str


# ---------- Events ----------
class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    event_date: str  # YYYY-MM-DD
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    is_published: bool = False
    max_attendees: Optional[int] = Field(None, ge=0)
    ticket_price: float = Field(0, ge=0)


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    category_id: Optional[int] = None
    is_published: Optional[bool] = None
    max_attendees: Optional[int] = Field(None, ge=0)
    ticket_price: Optional[float] = Field(None, ge=0)


class CategoryCreate(BaseModel):
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


# ---------- Blog ----------
class BlogPostCreate(BaseModel):
    title: str
    content: str = ""
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[int] = None
    is_published: bool = False
    publish_date: Optional[datetime] = None
    author_name: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class BlogPostUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[int] = None
    is_published: Optional[bool] = None
    publish_date: Optional[datetime] = None
    author_name: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


# ---------- Content ----------
class ImageUpload(BaseModel):
    image_data: str = Field(..., description="data:<mime>;base64,<payload>")
    file_name: str
    type: Literal["event", "blog"]
    target_id: Optional[int] = None


# ---------- Messages ----------
class ContactMessage(BaseModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str


class MessageUpdate(BaseModel):
    status: Optional[MessageStatus] = None
    reply_message: Optional[str] = None
    admin_email: Optional[str] = None
