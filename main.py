from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

import analytics
import blog
import bookings
import content
import events
import menu
import messages
import orders
import tickets
from auth import login, require_admin
from config import settings
from database import Store, get_store
from errors import ServiceError
from payments import DemoGateway, Gateway, get_gateway
from schemas import (
    BlogPostCreate, BlogPostUpdate,
    BookingCreate, BookingStatusUpdate,
    BulkAvailability, CategoryCreate,
    CheckoutConfirmRequest, CheckoutIntentRequest,
    ContactMessage, EventCreate, EventUpdate,
    ImageUpload, LoginRequest,
    MenuCategoryCreate, MenuItemCreate, MenuItemUpdate,
    MessageUpdate, OrderCreate, OrderStatusUpdate,
    TicketConfirmRequest, TicketIntentRequest,
)
from seed import init_database

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.backend_available:
        # demo mode still needs an admin account to sign in with
        init_database(get_store())
    yield


app = FastAPI(title="Clifton's Coffee Shop API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/media", StaticFiles(directory=settings.media_root, check_dir=False), name="media")


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message, "code": exc.code},
    )


def ok(data: Any = None) -> Dict[str, Any]:
    return {"success": True, "data": jsonable_encoder(data)}


@app.get("/")
def root():
    return {"message": "Clifton's Coffee Shop API running"}


@app.get("/health")
def health():
    return {
        "backend": "fastapi",
        "database": "mongodb" if settings.backend_available else "demo",
        "payments": "stripe" if settings.payments_enabled else "demo",
        "publishable_key": settings.stripe_publishable_key,
    }


# ============== AUTH ==================
@app.post("/auth/login")
def admin_login(payload: LoginRequest, store: Store = Depends(get_store)):
    return ok(login(store, payload.email, payload.password))


# ============== MENU ==================
@app.get("/menu")
def public_menu(store: Store = Depends(get_store)):
    return ok(menu.get_public_menu(store))


@app.get("/admin/menu/items", dependencies=[Depends(require_admin)])
def admin_menu_items(store: Store = Depends(get_store)):
    return ok(menu.get_menu_items(store))


@app.post("/admin/menu/items", dependencies=[Depends(require_admin)])
def admin_create_menu_item(payload: MenuItemCreate, store: Store = Depends(get_store)):
    return ok(menu.create_menu_item(store, payload.model_dump()))


@app.patch("/admin/menu/items/{item_id}", dependencies=[Depends(require_admin)])
def admin_update_menu_item(item_id: int, payload: MenuItemUpdate, store: Store = Depends(get_store)):
    return ok(menu.update_menu_item(store, item_id, payload.model_dump(exclude_unset=True)))


@app.delete("/admin/menu/items/{item_id}", dependencies=[Depends(require_admin)])
def admin_delete_menu_item(item_id: int, store: Store = Depends(get_store)):
    return ok(menu.delete_menu_item(store, item_id))


@app.post("/admin/menu/items/availability", dependencies=[Depends(require_admin)])
def admin_bulk_availability(payload: BulkAvailability, store: Store = Depends(get_store)):
    return ok(menu.bulk_update_availability(store, payload.ids, payload.is_available))


@app.get("/admin/menu/categories", dependencies=[Depends(require_admin)])
def admin_menu_categories(store: Store = Depends(get_store)):
    return ok(menu.get_categories(store))


@app.post("/admin/menu/categories", dependencies=[Depends(require_admin)])
def admin_create_menu_category(payload: MenuCategoryCreate, store: Store = Depends(get_store)):
    return ok(menu.create_category(store, payload.model_dump()))


# ============== CHECKOUT & ORDERS ==================
@app.post("/checkout/payment-intent")
def checkout_payment_intent(payload: CheckoutIntentRequest, gateway: Gateway = Depends(get_gateway)):
    return ok(orders.create_order_payment_intent(
        gateway,
        amount=payload.amount,
        cart_items=payload.cart_items,
        customer_email=payload.customer_email,
        customer_name=payload.customer_name,
        customer_phone=payload.customer_phone,
        order_type=payload.order_type,
        delivery_address=payload.delivery_address,
        special_instructions=payload.special_instructions,
        currency=payload.currency,
    ))


@app.post("/checkout/confirm")
def checkout_confirm(payload: CheckoutConfirmRequest, store: Store = Depends(get_store),
                     gateway: Gateway = Depends(get_gateway)):
    return ok(orders.confirm_order(
        store, gateway,
        payment_intent_id=payload.payment_intent_id,
        cart_items=payload.cart_items,
        customer_email=payload.customer_email,
        customer_name=payload.customer_name,
        total_amount=payload.total_amount,
        customer_phone=payload.customer_phone,
        order_type=payload.order_type,
        delivery_address=payload.delivery_address,
        special_instructions=payload.special_instructions,
    ))


@app.post("/orders")
def create_order(payload: OrderCreate, store: Store = Depends(get_store)):
    return ok(orders.create_order(store, payload.model_dump()))


@app.get("/orders", dependencies=[Depends(require_admin)])
def list_orders(status: Optional[str] = None, store: Store = Depends(get_store)):
    return ok(orders.list_orders(store, status))


@app.get("/orders/{order_id}", dependencies=[Depends(require_admin)])
def order_details(order_id: int, store: Store = Depends(get_store)):
    return ok(orders.get_order_details(store, order_id))


@app.post("/orders/{order_id}/status", dependencies=[Depends(require_admin)])
def update_order_status(order_id: int, payload: OrderStatusUpdate, store: Store = Depends(get_store)):
    return ok(orders.update_order_status(store, order_id, payload.status))


# ============== BOOKINGS ==================
@app.post("/bookings")
def create_booking(payload: BookingCreate, store: Store = Depends(get_store)):
    return ok(bookings.create_table_booking(store, **payload.model_dump()))


@app.get("/bookings", dependencies=[Depends(require_admin)])
def list_bookings(date: Optional[str] = None, store: Store = Depends(get_store)):
    return ok(bookings.list_bookings(store, date))


@app.post("/bookings/{booking_id}/status", dependencies=[Depends(require_admin)])
def update_booking_status(booking_id: int, payload: BookingStatusUpdate, store: Store = Depends(get_store)):
    return ok(bookings.update_booking_status(store, booking_id, payload.status))


# ============== TICKETS ==================
@app.post("/tickets/payment-intent")
def ticket_payment_intent(payload: TicketIntentRequest, store: Store = Depends(get_store),
                          gateway: Gateway = Depends(get_gateway)):
    return ok(tickets.create_payment_intent(store, gateway, **payload.model_dump()))


@app.post("/tickets/confirm")
def ticket_confirm(payload: TicketConfirmRequest, store: Store = Depends(get_store),
                   gateway: Gateway = Depends(get_gateway)):
    return ok(tickets.confirm_ticket_purchase(store, gateway, payload.payment_intent_id))


@app.get("/tickets/sales", dependencies=[Depends(require_admin)])
def ticket_sales(store: Store = Depends(get_store)):
    return ok(tickets.get_ticket_sales(store))


@app.get("/tickets/sales.csv", dependencies=[Depends(require_admin)])
def ticket_sales_csv(store: Store = Depends(get_store)):
    body = tickets.export_ticket_sales_csv(tickets.get_ticket_sales(store))
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{tickets.export_filename()}"'},
    )


# ============== EVENTS ==================
@app.get("/admin/events", dependencies=[Depends(require_admin)])
def admin_events(store: Store = Depends(get_store)):
    return ok(events.get_events(store))


@app.post("/admin/events", dependencies=[Depends(require_admin)])
def admin_create_event(payload: EventCreate, store: Store = Depends(get_store)):
    return ok(events.create_event(store, payload.model_dump()))


@app.get("/admin/events/categories", dependencies=[Depends(require_admin)])
def admin_event_categories(store: Store = Depends(get_store)):
    return ok(events.get_event_categories(store))


@app.post("/admin/events/categories", dependencies=[Depends(require_admin)])
def admin_create_event_category(payload: CategoryCreate, store: Store = Depends(get_store)):
    return ok(events.create_event_category(store, payload.model_dump()))


@app.patch("/admin/events/{event_id}", dependencies=[Depends(require_admin)])
def admin_update_event(event_id: int, payload: EventUpdate, store: Store = Depends(get_store)):
    return ok(events.update_event(store, event_id, payload.model_dump(exclude_unset=True)))


@app.delete("/admin/events/{event_id}", dependencies=[Depends(require_admin)])
def admin_delete_event(event_id: int, store: Store = Depends(get_store)):
    return ok(events.delete_event(store, event_id))


# ============== BLOG ==================
@app.get("/admin/blog/posts", dependencies=[Depends(require_admin)])
def admin_blog_posts(store: Store = Depends(get_store)):
    return ok(blog.get_blog_posts(store))


@app.post("/admin/blog/posts", dependencies=[Depends(require_admin)])
def admin_create_blog_post(payload: BlogPostCreate, store: Store = Depends(get_store)):
    return ok(blog.create_blog_post(store, payload.model_dump()))


@app.patch("/admin/blog/posts/{post_id}", dependencies=[Depends(require_admin)])
def admin_update_blog_post(post_id: int, payload: BlogPostUpdate, store: Store = Depends(get_store)):
    return ok(blog.update_blog_post(store, post_id, payload.model_dump(exclude_unset=True)))


@app.delete("/admin/blog/posts/{post_id}", dependencies=[Depends(require_admin)])
def admin_delete_blog_post(post_id: int, store: Store = Depends(get_store)):
    return ok(blog.delete_blog_post(store, post_id))


@app.get("/admin/blog/categories", dependencies=[Depends(require_admin)])
def admin_blog_categories(store: Store = Depends(get_store)):
    return ok(blog.get_blog_categories(store))


@app.post("/admin/blog/categories", dependencies=[Depends(require_admin)])
def admin_create_blog_category(payload: CategoryCreate, store: Store = Depends(get_store)):
    return ok(blog.create_blog_category(store, payload.model_dump()))


# ============== CONTENT ==================
@app.get("/content")
def public_content(type: str = "all", limit: int = 10, published: bool = False,
                   category: Optional[int] = None, store: Store = Depends(get_store)):
    return ok(content.get_public_content(store, type, limit, published, category))


@app.post("/admin/content/images", dependencies=[Depends(require_admin)])
def upload_image(payload: ImageUpload, store: Store = Depends(get_store)):
    return ok(content.upload_content_image(
        store, payload.image_data, payload.file_name, payload.type, payload.target_id
    ))


# ============== MESSAGES ==================
@app.post("/contact")
def contact(payload: ContactMessage, store: Store = Depends(get_store)):
    return messages.submit_contact_message(store, **payload.model_dump())


@app.get("/admin/messages", dependencies=[Depends(require_admin)])
def admin_messages(page: int = 1, limit: int = 50, status: Optional[str] = None,
                   store: Store = Depends(get_store)):
    result = messages.list_messages(store, page, limit, status)
    return {"success": True, **jsonable_encoder(result)}


@app.get("/admin/messages/{message_id}", dependencies=[Depends(require_admin)])
def admin_message(message_id: int, store: Store = Depends(get_store)):
    return ok(messages.get_message(store, message_id))


@app.patch("/admin/messages/{message_id}")
def admin_update_message(message_id: int, payload: MessageUpdate, store: Store = Depends(get_store),
                         admin: Dict[str, Any] = Depends(require_admin)):
    return ok(messages.update_message(
        store, message_id, payload.status, payload.reply_message, payload.admin_email or admin["email"]
    ))


# ============== ANALYTICS ==================
@app.get("/admin/analytics/overview", dependencies=[Depends(require_admin)])
def analytics_overview(period: str = "7d", store: Store = Depends(get_store)):
    return ok(analytics.overview(store, period))


@app.get("/admin/analytics/popular-items", dependencies=[Depends(require_admin)])
def analytics_popular_items(period: str = "7d", store: Store = Depends(get_store)):
    return ok(analytics.popular_items(store, period))


# ============== OPERATIONS ==================
@app.post("/admin/database/init", dependencies=[Depends(require_admin)])
def database_init(store: Store = Depends(get_store)):
    return ok(init_database(store))


@app.post("/demo/payments/{intent_id}/succeed")
def demo_payment_succeeded(intent_id: str, gateway: Gateway = Depends(get_gateway)):
    # stands in for the card form when running without processor keys
    if not isinstance(gateway, DemoGateway):
        raise HTTPException(status_code=404, detail="Not found")
    return ok(gateway.mark_succeeded(intent_id).model_dump())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
