"""
HTTP Routes

RESTful API endpoint definitions for the admin dashboard and the public
product list.
"""

from fastapi import APIRouter, Depends, Query, Request
from loguru import logger

from storefront.api.context import AdminContext
from storefront.core.constants import APP_VERSION
from storefront.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    RateLimitExceeded,
)
from storefront.models.auth import AuthState, SessionSnapshot
from storefront.models.requests import LoginRequest, ProductRequest
from storefront.models.responses import (
    HealthResponse,
    BaseResponse,
    SessionResponse,
    LoginResponse,
    ProductResponse,
    ProductListResponse,
    PaymentStatusResponse,
    OnboardingResponse,
    PaymentNoticeResponse,
    ImageUploadResponse,
)


# Create router
router = APIRouter()


def get_context(request: Request) -> AdminContext:
    """Get the admin context attached to the app."""
    return request.app.state.context


def require_owner(context: AdminContext = Depends(get_context)) -> AdminContext:
    """
    Allow the request only for an authenticated store owner.

    Raises:
        AuthenticationError: If nobody is signed in
        AuthorizationError: If the signed-in user is not (yet) verified as owner
    """
    state = context.session.state
    if state == AuthState.AUTHENTICATED:
        return context

    if state in (AuthState.NOT_OWNER, AuthState.VERIFYING):
        raise AuthorizationError(details={"state": state.value})

    raise AuthenticationError(details={"state": state.value})


def _session_body(snapshot: SessionSnapshot) -> dict:
    body = snapshot.to_dict()
    body["success"] = True
    return body


@router.get("/health", response_model=HealthResponse)
async def health(context: AdminContext = Depends(get_context)):
    """
    Health check endpoint.

    Returns server status, version and the admin session state.
    """
    return {
        "success": True,
        "version": APP_VERSION,
        "status": "ok",
        "message": "Server is healthy",
        "auth_state": context.session.state.value,
    }


# ===== Session Endpoints =====

@router.get("/admin/session", response_model=SessionResponse)
async def get_session(context: AdminContext = Depends(get_context)):
    """Current admin session state."""
    context.session.refresh_lockout()
    return _session_body(context.session.snapshot())


@router.post("/admin/login", response_model=LoginResponse)
async def login(request: LoginRequest, context: AdminContext = Depends(get_context)):
    """
    Submit the admin sign-in form.

    **Security**: Attempts are rate limited per store. A locked form answers
    429 with Retry-After; other failures carry the remaining attempts.
    """
    outcome = await context.session.sign_in(request.email, request.password)

    if outcome.locked and not outcome.success:
        raise RateLimitExceeded(
            outcome.message,
            retry_after=outcome.lockout_minutes * 60,
            details={"lockout_minutes": outcome.lockout_minutes}
        )

    body = _session_body(context.session.snapshot())
    body.update({
        "success": outcome.success,
        "message": outcome.message,
        "locked": outcome.locked,
        "lockout_minutes": outcome.lockout_minutes,
        "attempts_left": outcome.attempts_left,
    })
    return body


@router.post("/admin/logout", response_model=SessionResponse)
async def logout(context: AdminContext = Depends(get_context)):
    """Sign out of the admin dashboard."""
    await context.session.sign_out()
    return _session_body(context.session.snapshot())


# ===== Product Endpoints =====

@router.get("/products", response_model=ProductListResponse)
async def list_products(context: AdminContext = Depends(get_context)):
    """Public product list."""
    products = [p.to_dict() for p in context.products.list()]
    return {
        "success": True,
        "products": products,
        "total": len(products),
    }


@router.post("/admin/products", response_model=ProductResponse)
async def add_product(request: ProductRequest, context: AdminContext = Depends(require_owner)):
    """
    Add a product.

    **Security**: All fields are sanitized; rejected forms return 400 with
    the rejection reason in details.reason.
    """
    product = await context.products.save(request.to_draft())
    return {
        "success": True,
        "message": "Product added successfully!",
        "product": product.to_dict(),
    }


@router.put("/admin/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    request: ProductRequest,
    context: AdminContext = Depends(require_owner)
):
    """Replace an existing product."""
    product = await context.products.save(request.to_draft(), product_id=product_id)
    return {
        "success": True,
        "message": "Product updated successfully!",
        "product": product.to_dict(),
    }


@router.delete("/admin/products/{product_id}", response_model=BaseResponse)
async def delete_product(product_id: str, context: AdminContext = Depends(require_owner)):
    """Delete a product and its uploaded image."""
    await context.products.delete(product_id)
    return {
        "success": True,
        "message": "Product deleted",
    }


@router.post("/admin/images", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    filename: str = Query(..., min_length=1, max_length=255),
    product_name: str = Query(default=""),
    context: AdminContext = Depends(require_owner)
):
    """
    Upload a product image.

    The raw image bytes are the request body; the MIME type comes from the
    Content-Type header.
    """
    content = await request.body()
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()

    result = await context.products.upload_image(
        user_id=context.session.user.uid,
        filename=filename,
        content_type=content_type,
        content=content,
        product_name=product_name or None,
    )

    if result.needs_connection:
        message = "Connect your store's storage before uploading images"
    else:
        message = "Image uploaded"

    return {
        "success": not result.needs_connection,
        "message": message,
        "url": result.url,
        "file_id": result.file_id,
        "needs_connection": result.needs_connection,
    }


# ===== Payment Endpoints =====

@router.get("/admin/payments/status", response_model=PaymentStatusResponse)
async def payment_status(
    refresh: bool = False,
    context: AdminContext = Depends(require_owner)
):
    """Stripe Connect status; refresh=true re-checks with the backend."""
    status = await context.payments.check_status() if refresh else context.payments.status
    return {
        "success": True,
        "loading": status.loading,
        "connected": status.connected,
        "charges_enabled": status.charges_enabled,
        "account_id": status.account_id,
    }


@router.post("/admin/payments/onboarding", response_model=OnboardingResponse)
async def start_onboarding(context: AdminContext = Depends(require_owner)):
    """Start Stripe Connect onboarding and return the onboarding URL."""
    url = await context.payments.start_onboarding(context.session.user)
    return {
        "success": True,
        "onboarding_url": url,
    }


@router.post("/admin/payments/return", response_model=PaymentNoticeResponse)
async def payment_return(request: Request, context: AdminContext = Depends(require_owner)):
    """
    Handle the redirect back from Stripe onboarding.

    Pass the query parameters Stripe returned with (connect_success or
    connect_refresh).
    """
    notice = await context.payments.handle_return(dict(request.query_params))
    if notice is None:
        logger.debug("Payment return called without onboarding parameters")
        return {"success": True, "notice": None}

    return {
        "success": notice.success,
        "message": notice.message,
        "notice": notice.message,
    }
