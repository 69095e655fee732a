import structlog

from medtrack.modules.subscriptions.models import PushSubscription
from medtrack.modules.subscriptions.schemas import PushSubscriptionCreate

log = structlog.get_logger()


class PushSubscriptionService:
    async def subscribe(self, user_id: str, payload: PushSubscriptionCreate) -> PushSubscription:
        endpoint = str(payload.endpoint)
        subscription = await PushSubscription.find_one(PushSubscription.endpoint == endpoint)
        if subscription:
            subscription.user_id = user_id
            subscription.p256dh = payload.p256dh
            subscription.auth = payload.auth
            await subscription.save()
        else:
            subscription = PushSubscription(
                user_id=user_id,
                endpoint=endpoint,
                p256dh=payload.p256dh,
                auth=payload.auth,
            )
            await subscription.insert()
        log.info("push.subscribed", user_id=user_id, subscription_id=str(subscription.id))
        return subscription

    async def unsubscribe(self, endpoint: str) -> bool:
        subscription = await PushSubscription.find_one(PushSubscription.endpoint == endpoint)
        if not subscription:
            return False
        await subscription.delete()
        log.info("push.unsubscribed", subscription_id=str(subscription.id))
        return True
